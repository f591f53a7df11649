"""lsync transcribe command — transcribe, translate and rewrite recordings."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.markup import escape
from rich.table import Table

from linguasync.cli.utils import build_history, build_router, expand_inputs, fail
from linguasync.core.config import LinguaSyncConfig, load_config
from linguasync.core.errors import LinguaSyncError
from linguasync.core.models import AudioInput, TranscriptionResult
from linguasync.utils.console import console


def transcribe(
    inputs: Annotated[
        list[str],
        typer.Argument(help="Audio file paths, glob patterns, or .txt path lists."),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="JSON output path. Default: <input>.transcription.json"),
    ] = None,
    no_json: Annotated[
        bool,
        typer.Option("--no-json", help="Skip writing the JSON result file."),
    ] = False,
    history: Annotated[
        bool,
        typer.Option("--history/--no-history", help="Save results to the local history."),
    ] = True,
    model: Annotated[
        Optional[str],
        typer.Option("--model", "-m", help="Primary model (e.g. gemini/gemini-2.5-flash)."),
    ] = None,
    retries: Annotated[
        Optional[int],
        typer.Option("--retries", help="Maximum attempts per provider call."),
    ] = None,
) -> None:
    """Transcribe recordings with translation and idiomatic rewrites.

    Accepts multiple inputs: files, glob patterns (*.m4a), or .txt files
    containing one path per line.
    """
    overrides: dict[str, object] = {
        "providers.primary_model": model,
        "retry.max_attempts": retries,
    }
    if not history:
        overrides["history.enabled"] = False
    config = load_config(**overrides)

    expanded = expand_inputs(inputs)
    if not expanded:
        console.print("[red]No inputs resolved. Check your paths or patterns.[/red]")
        raise typer.Exit(1)

    if len(expanded) == 1:
        try:
            _transcribe_single(Path(expanded[0]), config, output, not no_json)
        except (LinguaSyncError, OSError) as e:
            raise fail(e)
        return

    if output is not None:
        console.print("[yellow]--output ignored in batch mode (auto-naming per file).[/yellow]")

    results: list[tuple[str, str, str]] = []
    console.print(f"[bold]Batch transcribing {len(expanded)} inputs...[/bold]\n")
    for i, inp in enumerate(expanded, 1):
        console.rule(f"[bold][{i}/{len(expanded)}][/bold] {inp}")
        try:
            result = _transcribe_single(Path(inp), config, None, not no_json)
            results.append((inp, "OK", f"{len(result.segments)} segments"))
        except (LinguaSyncError, OSError) as e:
            console.print(f"[red]Failed:[/red] {escape(str(e))}")
            results.append((inp, "FAILED", str(e)[:60]))

    table = Table(title="Batch Summary")
    table.add_column("Input", style="cyan", max_width=50)
    table.add_column("Status")
    table.add_column("Detail", style="dim")
    for inp, status, detail in results:
        style = "green" if status == "OK" else "red"
        table.add_row(inp, f"[{style}]{status}[/{style}]", detail)
    console.print(table)

    if any(status == "FAILED" for _, status, _ in results):
        raise typer.Exit(1)


def _transcribe_single(
    path: Path,
    config: LinguaSyncConfig,
    output: Path | None,
    write_json: bool,
) -> TranscriptionResult:
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    audio = AudioInput.from_path(path)
    router = build_router(config)
    result = asyncio.run(router.transcribe(audio))

    display_transcription(result)

    if write_json:
        json_path = output or path.with_suffix(".transcription.json")
        json_path.write_text(
            json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
        )
        console.print(f"[green]Saved:[/green] {json_path}")

    if config.history.enabled:
        # History is best-effort; a failure here never fails the transcription
        try:
            entry = build_history(config).save(audio, result)
            console.print(f"[dim]Saved to history:[/dim] {entry.id}")
        except OSError as e:
            console.print(f"[yellow]Failed to save history:[/yellow] {escape(str(e))}")

    return result


def display_transcription(result: TranscriptionResult) -> None:
    meta = result.meta
    console.print(
        f"[bold]Language:[/bold] {escape(result.language)}  "
        f"[bold]Words:[/bold] {meta.word_count}  "
        f"[bold]Level:[/bold] {escape(meta.estimated_level) or '-'}  "
        f"[bold]Speed:[/bold] {escape(meta.speed) or '-'}"
    )

    table = Table(show_lines=True)
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Text")
    table.add_column("Translation", style="cyan")
    table.add_column("Idiomatic", style="green")
    for i, seg in enumerate(result.segments):
        star = " [yellow]★[/yellow]" if seg.is_favorite else ""
        idiomatic = escape(seg.idiomatic)
        if seg.idiom_explanation:
            idiomatic += f"\n[dim]{escape(seg.idiom_explanation)}[/dim]"
        table.add_row(
            f"{i}. {_format_time(seg.start)}–{_format_time(seg.end)}{star}",
            escape(seg.text),
            escape(seg.translation),
            idiomatic,
        )
    console.print(table)


def _format_time(seconds: float) -> str:
    minutes, secs = divmod(round(seconds, 1), 60)
    return f"{int(minutes):02d}:{secs:04.1f}"
