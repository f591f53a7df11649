"""Shared data models for LinguaSync."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

Accuracy = Literal["good", "average", "poor"]
ACCURACY_LEVELS: tuple[str, ...] = ("good", "average", "poor")


@dataclass(frozen=True)
class AudioInput:
    """An audio recording supplied by the user.

    ``mime_type`` is the declared content type and may be empty or generic
    (e.g. "application/octet-stream"); see ``resolve_mime_type``.
    """

    data: bytes
    mime_type: str
    filename: str

    @classmethod
    def from_path(cls, path: Path) -> AudioInput:
        """Read an audio file, declaring its type from the extension."""
        path = Path(path)
        declared, _ = mimetypes.guess_type(path.name)
        return cls(data=path.read_bytes(), mime_type=declared or "", filename=path.name)


@dataclass
class TranscriptionSegment:
    """A time-bounded span of speech with translation and idiomatic rewrite."""

    start: float  # seconds
    end: float  # seconds
    text: str
    translation: str
    idiomatic: str
    idiom_explanation: str
    is_favorite: bool = False

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "translation": self.translation,
            "idiomatic": self.idiomatic,
            "idiomExplanation": self.idiom_explanation,
            "isFavorite": self.is_favorite,
        }


@dataclass
class TranscriptionMeta:
    """Recording-level statistics estimated by the provider."""

    word_count: int = 0
    estimated_level: str = ""
    speed: str = ""

    def to_dict(self) -> dict:
        return {
            "wordCount": self.word_count,
            "estimatedLevel": self.estimated_level,
            "speed": self.speed,
        }


@dataclass
class TranscriptionResult:
    """Output of the transcription task."""

    language: str
    meta: TranscriptionMeta = field(default_factory=TranscriptionMeta)
    segments: list[TranscriptionSegment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "meta": self.meta.to_dict(),
            "segments": [seg.to_dict() for seg in self.segments],
        }


@dataclass
class WordDefinition:
    word: str
    definition: str
    example: str
    phonetic: str | None = None

    def to_dict(self) -> dict:
        data = {"word": self.word, "definition": self.definition, "example": self.example}
        if self.phonetic is not None:
            data["phonetic"] = self.phonetic
        return data


@dataclass
class PronunciationScore:
    score: float  # 0-100
    feedback: str
    accuracy: Accuracy

    def to_dict(self) -> dict:
        return {"score": self.score, "feedback": self.feedback, "accuracy": self.accuracy}


@dataclass
class HistoryEntry:
    """A saved transcription session.

    Attributes:
        id: Entry id (epoch milliseconds at save time, as a string).
        filename: Original audio filename.
        date: Save time in epoch milliseconds.
        audio_path: Stored copy of the original recording.
        transcription: The transcription result.
    """

    id: str
    filename: str
    date: int
    audio_path: Path
    transcription: TranscriptionResult
