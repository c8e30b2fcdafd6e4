"""Folds stored quiz records into progress statistics."""

from __future__ import annotations

from dataclasses import dataclass

from exam_notes.core.models import Note, ProgressSummary, QuizRecord, Student
from exam_notes.core.services.score_calculator import percentage


@dataclass(frozen=True, slots=True)
class OverallStats:
    """Numbers shown at the top of the admin performance view."""

    total_students: int
    total_notes: int
    total_attempts: int
    average_score: int


def aggregate_progress(
    records: list[QuizRecord],
    note_id: str | None = None,
    subject_id: str | None = None,
) -> ProgressSummary:
    """Summarise one student's quiz history, optionally scoped to a note or subject."""
    scoped = [
        record
        for record in records
        if (note_id is None or record.note_id == note_id)
        and (subject_id is None or record.subject_id == subject_id)
    ]
    if not scoped:
        return ProgressSummary()

    return ProgressSummary(
        total_attempts=len(scoped),
        average_score=_average_score(scoped),
        best_score=max(record.score for record in scoped),
        last_attempt_at=max(record.completed_at for record in scoped),
    )


def per_student_averages(records: list[QuizRecord]) -> dict[str, int]:
    grouped: dict[str, list[QuizRecord]] = {}
    for record in records:
        grouped.setdefault(record.student_id, []).append(record)
    return {student_id: _average_score(items) for student_id, items in grouped.items()}


def overall_stats(
    students: list[Student],
    notes: list[Note],
    records: list[QuizRecord],
) -> OverallStats:
    return OverallStats(
        total_students=len(students),
        total_notes=len(notes),
        total_attempts=len(records),
        average_score=_average_score(records),
    )


def _average_score(records: list[QuizRecord]) -> int:
    return percentage(sum(record.score for record in records), 100 * len(records))
