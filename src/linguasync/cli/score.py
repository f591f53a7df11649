"""lsync score command — grade pronunciation of a recorded phrase."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from linguasync.cli.utils import build_router, fail
from linguasync.core.config import load_config
from linguasync.core.errors import LinguaSyncError
from linguasync.core.models import AudioInput
from linguasync.utils.console import console

_ACCURACY_STYLES = {"good": "green", "average": "yellow", "poor": "red"}


def score(
    recording: Annotated[Path, typer.Argument(help="Recording of the user reading the text.")],
    reference: Annotated[str, typer.Argument(help="The text the user was asked to read.")],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the score as JSON on stdout."),
    ] = False,
) -> None:
    """Score pronunciation of a recording against reference text."""
    if not recording.is_file():
        console.print(f"[red]File not found:[/red] {recording}")
        raise typer.Exit(1)

    router = build_router(load_config())
    try:
        result = asyncio.run(
            router.score_pronunciation(AudioInput.from_path(recording), reference)
        )
    except LinguaSyncError as e:
        raise fail(e)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), ensure_ascii=False))
        return

    style = _ACCURACY_STYLES[result.accuracy]
    console.print(f"[bold]Score:[/bold] [{style}]{result.score:.0f}/100 ({result.accuracy})[/{style}]")
    console.print(escape(result.feedback))
