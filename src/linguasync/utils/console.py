"""Shared rich console for status and diagnostic output."""

from rich.console import Console

console = Console(stderr=True)
