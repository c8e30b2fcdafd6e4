"""Saving and loading the whole data set as a single JSON document."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from enum import Enum
import json
import os
from pathlib import Path
from typing import Any

from exam_notes.constants.storage_constants import SNAPSHOT_VERSION
from exam_notes.core.models import (
    Category,
    Difficulty,
    Highlight,
    Note,
    NotePage,
    Question,
    QuizAttemptResult,
    QuizRecord,
    ReadingProgress,
    Student,
    Subject,
)


class SnapshotError(Exception):
    """Raised when a snapshot file cannot be read back."""


@dataclass(slots=True)
class Snapshot:
    """Everything the application persists between runs."""

    categories: list[Category] = field(default_factory=list)
    subjects: list[Subject] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)
    questions: list[Question] = field(default_factory=list)
    students: list[Student] = field(default_factory=list)
    quiz_records: list[QuizRecord] = field(default_factory=list)
    highlights: dict[tuple[str, str], list[Highlight]] = field(default_factory=dict)
    reading: dict[tuple[str, str], ReadingProgress] = field(default_factory=dict)
    bookmarks: dict[str, list[str]] = field(default_factory=dict)


def save_snapshot(file_path: Path, snapshot: Snapshot) -> None:
    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    document = {
        "version": SNAPSHOT_VERSION,
        "categories": [to_jsonable(item) for item in snapshot.categories],
        "subjects": [to_jsonable(item) for item in snapshot.subjects],
        "notes": [to_jsonable(item) for item in snapshot.notes],
        "questions": [to_jsonable(item) for item in snapshot.questions],
        "students": [to_jsonable(item) for item in snapshot.students],
        "quiz_records": [to_jsonable(item) for item in snapshot.quiz_records],
        "highlights": [
            {"student_id": student_id, "note_id": note_id, "items": [to_jsonable(h) for h in items]}
            for (student_id, note_id), items in snapshot.highlights.items()
        ],
        "reading": [
            {"student_id": student_id, "note_id": note_id, "entry": to_jsonable(entry)}
            for (student_id, note_id), entry in snapshot.reading.items()
        ],
        "bookmarks": snapshot.bookmarks,
    }
    # Written beside the target and swapped in, so a failed write keeps the old file.
    temp_path = file_path.with_name(file_path.name + ".tmp")
    temp_path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(temp_path, file_path)


def load_snapshot(file_path: Path) -> Snapshot:
    try:
        document = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Snapshot {file_path} is not valid JSON: {exc.msg}") from exc
    if document.get("version") != SNAPSHOT_VERSION:
        raise SnapshotError(f"Unsupported snapshot version {document.get('version')!r}.")

    try:
        return Snapshot(
            categories=[_decode_simple(Category, raw) for raw in document.get("categories", [])],
            subjects=[_decode_simple(Subject, raw) for raw in document.get("subjects", [])],
            notes=[_decode_note(raw) for raw in document.get("notes", [])],
            questions=[_decode_question(raw) for raw in document.get("questions", [])],
            students=[_decode_simple(Student, raw) for raw in document.get("students", [])],
            quiz_records=[_decode_record(raw) for raw in document.get("quiz_records", [])],
            highlights={
                (raw["student_id"], raw["note_id"]): [_decode_simple(Highlight, h) for h in raw["items"]]
                for raw in document.get("highlights", [])
            },
            reading={
                (raw["student_id"], raw["note_id"]): _decode_simple(ReadingProgress, raw["entry"])
                for raw in document.get("reading", [])
            },
            bookmarks={key: list(value) for key, value in document.get("bookmarks", {}).items()},
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise SnapshotError(f"Snapshot {file_path} is malformed: {exc}") from exc


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, enums and datetimes into JSON-ready values."""
    if is_dataclass(value):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


_DATETIME_FIELDS = {"created_at", "updated_at", "last_login", "completed_at", "last_read"}


def _decode_simple(cls: type, raw: dict[str, Any]) -> Any:
    values = {}
    for f in fields(cls):
        if f.name not in raw:
            continue
        value = raw[f.name]
        if f.name in _DATETIME_FIELDS and value is not None:
            value = datetime.fromisoformat(value)
        values[f.name] = value
    return cls(**values)


def _decode_note(raw: dict[str, Any]) -> Note:
    note = _decode_simple(Note, raw)
    note.pages = [NotePage(**page) for page in raw.get("pages", [])]
    note.difficulty = Difficulty(raw.get("difficulty", Difficulty.MEDIUM.value))
    return note


def _decode_question(raw: dict[str, Any]) -> Question:
    question = _decode_simple(Question, raw)
    question.difficulty = Difficulty(raw.get("difficulty", Difficulty.MEDIUM.value))
    return question


def _decode_record(raw: dict[str, Any]) -> QuizRecord:
    answers = tuple(QuizAttemptResult(**answer) for answer in raw.get("answers", []))
    return _decode_simple(QuizRecord, {**raw, "answers": answers})
