"""Audio payload helpers: content-type resolution and transport encoding."""

from __future__ import annotations

import base64

# Gemini treats m4a as an audio/mp4 container.
_KNOWN_MIME_TYPES: dict[str, str] = {
    "mp3": "audio/mp3",
    "wav": "audio/wav",
    "flac": "audio/flac",
    "m4a": "audio/mp4",
    "aac": "audio/aac",
    "ogg": "audio/ogg",
    "oga": "audio/ogg",
    "webm": "audio/webm",
    "mp4": "audio/mp4",
}

DEFAULT_MIME_TYPE = "audio/mp3"


def resolve_mime_type(filename: str, declared: str | None) -> str:
    """Best-effort audio content type for an uploaded recording.

    Mobile browsers and some file pickers report "" or
    "application/octet-stream", while the provider only accepts
    audio-family types for multimodal input.

    Args:
        filename: Original filename, used for the extension lookup.
        declared: Content type reported with the file, possibly empty.

    Returns:
        The declared type if it is audio/* or video/*, else a type guessed
        from the extension, else "audio/mp3".
    """
    if declared and declared.startswith(("audio/", "video/")):
        return declared

    if "." in filename:
        ext = filename.rsplit(".", 1)[1].lower()
        if ext in _KNOWN_MIME_TYPES:
            return _KNOWN_MIME_TYPES[ext]

    return DEFAULT_MIME_TYPE


def encode_base64(data: bytes) -> str:
    """Encode binary data as plain base64 text (no data-URI prefix)."""
    return base64.b64encode(data).decode("ascii")


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Wrap binary data as a base64 data URI for inline provider content."""
    return f"data:{mime_type};base64,{encode_base64(data)}"
