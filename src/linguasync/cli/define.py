"""lsync define command — look up a word in context."""

from __future__ import annotations

import asyncio
import json
from typing import Annotated

import typer
from rich.markup import escape

from linguasync.cli.utils import build_router, fail
from linguasync.core.config import load_config
from linguasync.core.errors import LinguaSyncError
from linguasync.utils.console import console


def define(
    word: Annotated[str, typer.Argument(help="Word to define.")],
    context: Annotated[
        str,
        typer.Option("--context", "-c", help="Sentence the word appeared in."),
    ] = "",
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the definition as JSON on stdout."),
    ] = False,
) -> None:
    """Define a word, falling back to DeepSeek if Gemini fails."""
    router = build_router(load_config())
    try:
        result = asyncio.run(router.define_word(word, context or word))
    except LinguaSyncError as e:
        raise fail(e)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), ensure_ascii=False))
        return

    phonetic = f" [dim]{escape(result.phonetic)}[/dim]" if result.phonetic else ""
    console.print(f"[bold]{escape(result.word)}[/bold]{phonetic}")
    console.print(escape(result.definition))
    console.print(f"[italic]{escape(result.example)}[/italic]")
