"""lsync speak command — synthesize speech for a phrase."""

from __future__ import annotations

import asyncio
import base64
import binascii
import wave
from pathlib import Path
from typing import Annotated, Optional

import typer

from linguasync.cli.utils import build_router, fail
from linguasync.core.config import load_config
from linguasync.core.errors import LinguaSyncError, NoAudioData
from linguasync.llm.router import SPEECH_SAMPLE_RATE
from linguasync.utils.console import console


def write_pcm_wav(pcm: bytes, path: Path, sample_rate: int = SPEECH_SAMPLE_RATE) -> None:
    """Wrap raw 16-bit mono PCM in a WAV container."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)


def speak(
    text: Annotated[str, typer.Argument(help="Text to read aloud.")],
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output WAV file."),
    ] = Path("speech.wav"),
    voice: Annotated[
        Optional[str],
        typer.Option("--voice", help="Prebuilt voice name (e.g. Kore)."),
    ] = None,
) -> None:
    """Generate native-speaker audio for a phrase."""
    config = load_config(**{"providers.voice": voice})
    router = build_router(config)

    try:
        audio_b64 = asyncio.run(router.synthesize_speech(text))
        pcm = base64.b64decode(audio_b64, validate=True)
    except binascii.Error as e:
        raise fail(NoAudioData(f"Audio payload is not valid base64: {e}"))
    except LinguaSyncError as e:
        raise fail(e)

    write_pcm_wav(pcm, output)
    console.print(f"[green]Saved:[/green] {output}")
