"""LinguaSync CLI entry point."""

from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from linguasync import __version__
from linguasync.cli.define import define
from linguasync.cli.history import history_app
from linguasync.cli.score import score
from linguasync.cli.speak import speak
from linguasync.cli.transcribe import transcribe

app = typer.Typer(
    name="lsync",
    help="LinguaSync — Transcription, translation & idiomatic coaching for language learners.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"lsync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """LinguaSync — Transcription, translation & idiomatic coaching for language learners."""
    # Load .env file for API keys (GEMINI_API_KEY, DEEPSEEK_API_KEY)
    # Shell exports take precedence over .env values
    load_dotenv(override=False)


app.command("transcribe")(transcribe)
app.command("speak")(speak)
app.command("score")(score)
app.command("define")(define)
app.add_typer(history_app, name="history")
