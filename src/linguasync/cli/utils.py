"""Shared CLI utilities."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape

from linguasync.core.config import LinguaSyncConfig, load_credentials
from linguasync.core.errors import CATEGORY_MESSAGES, MalformedResponse, classify_error
from linguasync.history.store import JsonHistoryStore
from linguasync.llm.router import ProviderRouter
from linguasync.utils.console import console


def expand_inputs(inputs: list[str]) -> list[str]:
    """Expand glob patterns and path list files into individual paths."""
    expanded = []
    for inp in inputs:
        path = Path(inp)

        # .txt file: one path per line
        if path.suffix == ".txt" and path.is_file():
            for line in path.read_text().splitlines():
                line = line.strip()
                if line and not line.startswith("#"):
                    expanded.append(line)
            continue

        # Try as glob pattern if it contains wildcards
        if any(c in inp for c in "*?["):
            matches = sorted(Path(".").glob(inp))
            if matches:
                expanded.extend(str(m) for m in matches)
                continue

        expanded.append(inp)

    return expanded


def build_router(config: LinguaSyncConfig) -> ProviderRouter:
    return ProviderRouter(
        load_credentials(config),
        providers=config.providers,
        policy=config.retry,
        merge=config.merge,
    )


def build_history(config: LinguaSyncConfig) -> JsonHistoryStore:
    return JsonHistoryStore(config.history.base_dir)


def fail(error: Exception) -> typer.Exit:
    """Print a user-facing message for a final error and return an Exit to raise."""
    category = classify_error(error)
    friendly = CATEGORY_MESSAGES.get(category)
    if friendly:
        console.print(f"[red]{friendly}[/red]")
        console.print(f"[dim]{escape(str(error))}[/dim]")
    else:
        console.print(f"[red]Error:[/red] {escape(str(error))}")
    if isinstance(error, MalformedResponse):
        console.print(f"[dim]Raw response:[/dim] {escape(repr(error.raw_text))}")
    return typer.Exit(1)
