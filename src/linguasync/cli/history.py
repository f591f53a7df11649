"""lsync history commands — browse and manage saved sessions."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from linguasync.cli.transcribe import display_transcription
from linguasync.cli.utils import build_history
from linguasync.core.config import load_config
from linguasync.utils.console import console

history_app = typer.Typer(help="Browse and manage saved transcriptions.", no_args_is_help=True)


def _format_date(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%Y-%m-%d %H:%M")


@history_app.command("list")
def list_entries() -> None:
    """List saved transcriptions, most recent first."""
    entries = build_history(load_config()).get_all()
    if not entries:
        console.print("[dim]No history yet.[/dim]")
        return

    table = Table(title="History")
    table.add_column("ID", style="cyan")
    table.add_column("Date")
    table.add_column("File")
    table.add_column("Segments", justify="right")
    for entry in entries:
        table.add_row(
            entry.id,
            _format_date(entry.date),
            escape(entry.filename),
            str(len(entry.transcription.segments)),
        )
    console.print(table)


@history_app.command("show")
def show(
    entry_id: Annotated[str, typer.Argument(help="History entry id.")],
    as_json: Annotated[bool, typer.Option("--json", help="Print as JSON on stdout.")] = False,
) -> None:
    """Show a saved transcription."""
    entry = build_history(load_config()).get(entry_id)
    if entry is None:
        console.print(f"[red]No history entry:[/red] {entry_id}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps(entry.transcription.to_dict(), indent=2, ensure_ascii=False))
        return

    console.print(f"[bold]{escape(entry.filename)}[/bold] [dim]({_format_date(entry.date)})[/dim]")
    console.print(f"[dim]Audio:[/dim] {entry.audio_path}")
    display_transcription(entry.transcription)


@history_app.command("favorite")
def favorite(
    entry_id: Annotated[str, typer.Argument(help="History entry id.")],
    index: Annotated[int, typer.Argument(help="Segment index (as shown by 'show').")],
) -> None:
    """Toggle the favorite flag on a segment."""
    store = build_history(load_config())
    entry = store.get(entry_id)
    if entry is None:
        console.print(f"[red]No history entry:[/red] {entry_id}")
        raise typer.Exit(1)

    segments = entry.transcription.segments
    if not 0 <= index < len(segments):
        console.print(f"[red]Segment index out of range:[/red] {index}")
        raise typer.Exit(1)

    segment = segments[index]
    segment.is_favorite = not segment.is_favorite
    store.update(entry)
    state = "starred" if segment.is_favorite else "unstarred"
    console.print(f"[green]Segment {index} {state}.[/green]")


@history_app.command("delete")
def delete(entry_id: Annotated[str, typer.Argument(help="History entry id.")]) -> None:
    """Delete a saved transcription."""
    build_history(load_config()).delete(entry_id)
    console.print(f"[green]Deleted:[/green] {entry_id}")
