"""Parse provider text replies into typed records.

Replies are expected to be JSON documents but are sometimes wrapped in a
markdown code fence. Parsing is strict: a reply that is not valid JSON, or
that lacks a required field or has the wrong type for one, raises
MalformedResponse with the raw text attached. Partially parsed linguistic
data is never returned.
"""

from __future__ import annotations

import json
import re
from typing import Any

from linguasync.core.errors import MalformedResponse
from linguasync.core.models import (
    ACCURACY_LEVELS,
    PronunciationScore,
    TranscriptionMeta,
    TranscriptionResult,
    TranscriptionSegment,
    WordDefinition,
)
from linguasync.utils.console import console

_LEADING_FENCE = re.compile(r"^\s*```[\w+-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?[ \t]*```\s*$")


def strip_fences(text: str) -> str:
    """Remove an optional leading ```lang fence and trailing ``` fence."""
    text = _LEADING_FENCE.sub("", text, count=1)
    return _TRAILING_FENCE.sub("", text, count=1)


def parse_json_response(text: str) -> Any:
    """Strip fencing from a provider reply and parse it as JSON.

    Raises:
        MalformedResponse: If the remainder is not valid JSON.
    """
    try:
        return json.loads(strip_fences(text))
    except (json.JSONDecodeError, TypeError) as e:
        console.print(f"[red]Could not parse provider reply as JSON:[/red] {text!r}")
        raise MalformedResponse(
            "Failed to parse AI response. Ensure content is valid JSON.", raw_text=text
        ) from e


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_object(value: object, what: str, raw: str) -> dict:
    if not isinstance(value, dict):
        raise MalformedResponse(f"Expected a JSON object for {what}", raw_text=raw)
    return value


def _require_str(data: dict, key: str, raw: str, where: str = "response") -> str:
    if key not in data:
        raise MalformedResponse(f"Missing required field '{key}' in {where}", raw_text=raw)
    value = data[key]
    if not isinstance(value, str):
        raise MalformedResponse(f"Field '{key}' in {where} must be a string", raw_text=raw)
    return value


def _require_number(data: dict, key: str, raw: str, where: str = "response") -> float:
    if key not in data:
        raise MalformedResponse(f"Missing required field '{key}' in {where}", raw_text=raw)
    value = data[key]
    if not _is_number(value):
        raise MalformedResponse(f"Field '{key}' in {where} must be a number", raw_text=raw)
    return float(value)


def _parse_meta(value: object, raw: str) -> TranscriptionMeta:
    meta = _require_object(value, "meta", raw)
    word_count = meta.get("wordCount", 0)
    if not _is_number(word_count):
        raise MalformedResponse("Field 'wordCount' in meta must be a number", raw_text=raw)
    level = meta.get("estimatedLevel", "")
    speed = meta.get("speed", "")
    if not isinstance(level, str) or not isinstance(speed, str):
        raise MalformedResponse("Fields 'estimatedLevel' and 'speed' must be strings", raw_text=raw)
    return TranscriptionMeta(word_count=int(word_count), estimated_level=level, speed=speed)


def _parse_segment(value: object, index: int, raw: str) -> TranscriptionSegment:
    where = f"segment {index}"
    seg = _require_object(value, where, raw)
    start = _require_number(seg, "start", raw, where)
    end = _require_number(seg, "end", raw, where)
    if end < start:
        raise MalformedResponse(f"Segment {index} ends before it starts", raw_text=raw)
    is_favorite = seg.get("isFavorite", False)
    return TranscriptionSegment(
        start=start,
        end=end,
        text=_require_str(seg, "text", raw, where),
        translation=_require_str(seg, "translation", raw, where),
        idiomatic=_require_str(seg, "idiomatic", raw, where),
        idiom_explanation=_require_str(seg, "idiomExplanation", raw, where),
        is_favorite=is_favorite if isinstance(is_favorite, bool) else False,
    )


def transcription_from_dict(data: object, raw: str = "") -> TranscriptionResult:
    """Validate a decoded transcription payload and build the typed result."""
    data = _require_object(data, "transcription", raw)
    language = _require_str(data, "language", raw)
    if "meta" not in data:
        raise MalformedResponse("Missing required field 'meta' in response", raw_text=raw)
    meta = _parse_meta(data["meta"], raw)
    segments = data.get("segments")
    if not isinstance(segments, list):
        raise MalformedResponse("Field 'segments' must be a list", raw_text=raw)
    parsed: list[TranscriptionSegment] = []
    for i, value in enumerate(segments):
        seg = _parse_segment(value, i, raw)
        if parsed:
            previous = parsed[-1]
            if seg.start < previous.start:
                raise MalformedResponse(f"Segment {i} starts before segment {i - 1}", raw_text=raw)
            if seg.start < previous.end:
                raise MalformedResponse(f"Segment {i} overlaps segment {i - 1}", raw_text=raw)
        parsed.append(seg)
    return TranscriptionResult(language=language, meta=meta, segments=parsed)


def parse_transcription(text: str) -> TranscriptionResult:
    return transcription_from_dict(parse_json_response(text), raw=text)


def parse_score(text: str) -> PronunciationScore:
    data = _require_object(parse_json_response(text), "pronunciation score", text)
    score = _require_number(data, "score", text)
    if not 0 <= score <= 100:
        raise MalformedResponse("Field 'score' is outside 0-100", raw_text=text)
    accuracy = _require_str(data, "accuracy", text)
    if accuracy not in ACCURACY_LEVELS:
        raise MalformedResponse(f"Unknown accuracy level '{accuracy}'", raw_text=text)
    return PronunciationScore(
        score=score,
        feedback=_require_str(data, "feedback", text),
        accuracy=accuracy,
    )


def parse_definition(text: str) -> WordDefinition:
    data = _require_object(parse_json_response(text), "word definition", text)
    phonetic = data.get("phonetic")
    if phonetic is not None and not isinstance(phonetic, str):
        raise MalformedResponse("Field 'phonetic' must be a string", raw_text=text)
    return WordDefinition(
        word=_require_str(data, "word", text),
        definition=_require_str(data, "definition", text),
        example=_require_str(data, "example", text),
        phonetic=phonetic or None,
    )
