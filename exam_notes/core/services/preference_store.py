"""Service for per-student reading preferences: highlights, bookmarks and progress."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import math
from uuid import uuid4

from exam_notes.constants.storage_constants import DEFAULT_HIGHLIGHT_COLOR
from exam_notes.core.models import Highlight, ReadingProgress, utcnow


@dataclass(frozen=True, slots=True)
class ReadingTotals:
    total_reading_time_seconds: int
    total_words_read: int
    notes_started: int
    last_note_id: str | None
    last_read: datetime | None


class PreferenceStore:
    """Keeps each student's reading state isolated from every other student."""

    def __init__(self) -> None:
        self._highlights: dict[tuple[str, str], list[Highlight]] = {}
        self._reading: dict[tuple[str, str], ReadingProgress] = {}
        self._bookmarks: dict[str, list[str]] = {}

    # --- Highlights ---

    def get_highlights(self, student_id: str, note_id: str) -> list[Highlight]:
        return list(self._highlights.get((student_id, note_id), []))

    def add_highlight(
        self,
        student_id: str,
        note_id: str,
        text: str,
        color: str | None = None,
        note: str | None = None,
    ) -> Highlight:
        cleaned = text.strip()
        if not cleaned:
            raise ValueError("Highlight text must not be empty.")
        highlight = Highlight(
            id=uuid4().hex,
            text=cleaned,
            color=color or DEFAULT_HIGHLIGHT_COLOR,
            note=note.strip() if note and note.strip() else None,
        )
        self._highlights.setdefault((student_id, note_id), []).append(highlight)
        return highlight

    def remove_highlight(self, student_id: str, note_id: str, highlight_id: str) -> bool:
        """Remove a highlight. Returns False if nothing matched."""
        highlights = self._highlights.get((student_id, note_id), [])
        remaining = [h for h in highlights if h.id != highlight_id]
        if len(remaining) == len(highlights):
            return False
        self._highlights[(student_id, note_id)] = remaining
        return True

    def all_highlights(self, student_id: str) -> list[tuple[str, Highlight]]:
        """Every highlight of a student as (note_id, highlight), newest first."""
        collected = [
            (note_id, highlight)
            for (owner, note_id), highlights in self._highlights.items()
            if owner == student_id
            for highlight in highlights
        ]
        return sorted(collected, key=lambda item: item[1].created_at, reverse=True)

    # --- Reading progress ---

    def get_reading_progress(self, student_id: str, note_id: str) -> ReadingProgress | None:
        return self._reading.get((student_id, note_id))

    def save_reading_progress(
        self,
        student_id: str,
        note_id: str,
        current_page: int,
        progress: float,
        reading_time_seconds: int = 0,
        words_read: int = 0,
    ) -> ReadingProgress:
        if current_page < 0:
            raise ValueError("Current page cannot be negative.")
        if not math.isfinite(progress):
            raise ValueError("Progress must be a finite percentage.")
        entry = ReadingProgress(
            current_page=current_page,
            progress=min(100, max(0, int(progress + 0.5))),
            reading_time_seconds=max(0, reading_time_seconds),
            words_read=max(0, words_read),
            last_read=utcnow(),
        )
        self._reading[(student_id, note_id)] = entry
        return entry

    def progress_by_note(self, student_id: str) -> dict[str, int]:
        return {
            note_id: entry.progress
            for (owner, note_id), entry in self._reading.items()
            if owner == student_id
        }

    def reading_totals(self, student_id: str) -> ReadingTotals:
        entries = [
            (note_id, entry)
            for (owner, note_id), entry in self._reading.items()
            if owner == student_id
        ]
        latest = max(entries, key=lambda item: item[1].last_read, default=None)
        return ReadingTotals(
            total_reading_time_seconds=sum(entry.reading_time_seconds for _, entry in entries),
            total_words_read=sum(entry.words_read for _, entry in entries),
            notes_started=len(entries),
            last_note_id=latest[0] if latest else None,
            last_read=latest[1].last_read if latest else None,
        )

    # --- Bookmarks ---

    def get_bookmarks(self, student_id: str) -> list[str]:
        return list(self._bookmarks.get(student_id, []))

    def toggle_bookmark(self, student_id: str, note_id: str) -> bool:
        """Flip the bookmark for a note. Returns True if the note is now bookmarked."""
        bookmarks = self._bookmarks.setdefault(student_id, [])
        if note_id in bookmarks:
            bookmarks.remove(note_id)
            return False
        bookmarks.append(note_id)
        return True

    def forget_student(self, student_id: str) -> None:
        self._bookmarks.pop(student_id, None)
        for key in [k for k in self._highlights if k[0] == student_id]:
            del self._highlights[key]
        for key in [k for k in self._reading if k[0] == student_id]:
            del self._reading[key]

    # --- Snapshot support ---

    def export_state(
        self,
    ) -> tuple[dict[tuple[str, str], list[Highlight]], dict[tuple[str, str], ReadingProgress], dict[str, list[str]]]:
        return (
            {key: list(value) for key, value in self._highlights.items()},
            dict(self._reading),
            {key: list(value) for key, value in self._bookmarks.items()},
        )

    def import_state(
        self,
        highlights: dict[tuple[str, str], list[Highlight]],
        reading: dict[tuple[str, str], ReadingProgress],
        bookmarks: dict[str, list[str]],
    ) -> None:
        self._highlights = {key: list(value) for key, value in highlights.items()}
        self._reading = dict(reading)
        self._bookmarks = {key: list(value) for key, value in bookmarks.items()}
