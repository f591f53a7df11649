"""Local history of transcription sessions.

Each entry lives in its own directory under the history base dir:

    <base_dir>/<id>/entry.json   metadata + transcription
    <base_dir>/<id>/<filename>   copy of the original recording

Entry ids are epoch milliseconds at save time.
"""

from __future__ import annotations

import json
import shutil
import time
from pathlib import Path
from typing import Protocol

from rich.markup import escape

from linguasync.core.errors import MalformedResponse
from linguasync.core.models import AudioInput, HistoryEntry, TranscriptionResult
from linguasync.llm.normalize import transcription_from_dict
from linguasync.utils.console import console

_ENTRY_FILE = "entry.json"


class HistoryStore(Protocol):
    """Keyed put/get/delete store for past transcriptions."""

    def save(self, audio: AudioInput, transcription: TranscriptionResult) -> HistoryEntry: ...

    def get_all(self) -> list[HistoryEntry]: ...

    def get(self, entry_id: str) -> HistoryEntry | None: ...

    def delete(self, entry_id: str) -> None: ...


def _safe_filename(name: str) -> str:
    """Reduce a user-supplied filename to its final component."""
    name = Path(name).name
    return name if name and name != _ENTRY_FILE else "audio"


class JsonHistoryStore:
    """History store backed by one JSON file per entry on disk."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)

    def save(self, audio: AudioInput, transcription: TranscriptionResult) -> HistoryEntry:
        """Persist a recording and its transcription as a new entry."""
        now = int(time.time() * 1000)
        entry_dir = self.base_dir / str(now)
        # Same-millisecond saves get the next free id
        while entry_dir.exists():
            now += 1
            entry_dir = self.base_dir / str(now)
        entry_dir.mkdir(parents=True)

        filename = audio.filename or "audio"
        audio_path = entry_dir / _safe_filename(filename)
        audio_path.write_bytes(audio.data)

        entry = HistoryEntry(
            id=str(now),
            filename=filename,
            date=now,
            audio_path=audio_path,
            transcription=transcription,
        )
        self._write(entry)
        return entry

    def update(self, entry: HistoryEntry) -> None:
        """Rewrite an existing entry's metadata (e.g. after toggling favorites)."""
        if not (self.base_dir / entry.id).is_dir():
            raise KeyError(f"No history entry with id {entry.id}")
        self._write(entry)

    def get(self, entry_id: str) -> HistoryEntry | None:
        entry_file = self.base_dir / Path(entry_id).name / _ENTRY_FILE
        if not entry_file.is_file():
            return None
        return self._load(entry_file)

    def get_all(self) -> list[HistoryEntry]:
        """All entries, most recent first. Unreadable entries are skipped."""
        if not self.base_dir.is_dir():
            return []
        entries = []
        for entry_file in self.base_dir.glob(f"*/{_ENTRY_FILE}"):
            try:
                entries.append(self._load(entry_file))
            except (OSError, ValueError, KeyError, MalformedResponse) as e:
                console.print(
                    f"[yellow]Skipping unreadable history entry {entry_file}:[/yellow] "
                    f"{escape(str(e))}"
                )
        return sorted(entries, key=lambda e: e.date, reverse=True)

    def delete(self, entry_id: str) -> None:
        """Remove an entry. Unknown ids are ignored."""
        entry_dir = self.base_dir / Path(entry_id).name
        if entry_dir.is_dir():
            shutil.rmtree(entry_dir)

    def _write(self, entry: HistoryEntry) -> None:
        data = {
            "id": entry.id,
            "fileName": entry.filename,
            "date": entry.date,
            "audioFile": entry.audio_path.name,
            "transcription": entry.transcription.to_dict(),
        }
        (self.base_dir / entry.id / _ENTRY_FILE).write_text(
            json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    def _load(self, entry_file: Path) -> HistoryEntry:
        data = json.loads(entry_file.read_text(encoding="utf-8"))
        raw = json.dumps(data["transcription"])
        return HistoryEntry(
            id=str(data["id"]),
            filename=data["fileName"],
            date=int(data["date"]),
            audio_path=entry_file.parent / data["audioFile"],
            transcription=transcription_from_dict(data["transcription"], raw=raw),
        )
