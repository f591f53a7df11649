"""Builders for fake provider responses shared across tests."""

import json

from linguasync.core.config import RetryPolicy

FAST_POLICY = RetryPolicy(max_attempts=3, initial_delay=0.0, backoff_multiplier=2.0)


def text_response(content) -> dict:
    """A LiteLLM-shaped response whose first choice carries text."""
    if not isinstance(content, str):
        content = json.dumps(content)
    return {"choices": [{"message": {"content": content}}]}


def audio_response(data: str | None) -> dict:
    """A LiteLLM-shaped response whose first choice carries base64 audio."""
    audio = {"data": data} if data is not None else None
    return {"choices": [{"message": {"content": None, "audio": audio}}]}


def segment(text: str, start: float, end: float, **overrides) -> dict:
    """Raw provider segment dict."""
    data = {
        "start": start,
        "end": end,
        "text": text,
        "translation": f"zh:{text}",
        "idiomatic": "",
        "idiomExplanation": "",
    }
    data.update(overrides)
    return data
