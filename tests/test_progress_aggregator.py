from __future__ import annotations

from exam_notes.core.models import Note, NotePage, Student
from exam_notes.core.services.progress_aggregator import (
    aggregate_progress,
    overall_stats,
    per_student_averages,
)


def test_empty_history_gives_zero_summary():
    summary = aggregate_progress([])

    assert summary.total_attempts == 0
    assert summary.average_score == 0
    assert summary.best_score == 0
    assert summary.last_attempt_at is None


def test_summary_over_history(make_record):
    records = [make_record(50, minutes=1), make_record(75, minutes=30), make_record(100, minutes=5)]

    summary = aggregate_progress(records)

    assert summary.total_attempts == 3
    assert summary.average_score == 75
    assert summary.best_score == 100
    assert summary.last_attempt_at == records[1].completed_at


def test_scoped_to_note_or_subject(make_record):
    records = [
        make_record(40, note_id="n1", subject_id="s1"),
        make_record(80, minutes=2, note_id="n2", subject_id="s1"),
        make_record(100, minutes=3, subject_id="s2"),
    ]

    assert aggregate_progress(records, note_id="n1").average_score == 40
    assert aggregate_progress(records, subject_id="s1").average_score == 60
    assert aggregate_progress(records, note_id="unknown").total_attempts == 0


def test_aggregation_is_repeatable(make_record):
    records = [make_record(33), make_record(34, minutes=1)]

    assert aggregate_progress(records) == aggregate_progress(records)
    assert aggregate_progress(records).average_score == 34


def test_overall_stats_and_per_student_averages(make_record):
    students = [Student(id="a", name="A", email="a@x.lk"), Student(id="b", name="B", email="b@x.lk")]
    notes = [Note(id="n", title="T", subject_id="s", category_id="c", pages=[NotePage(1, "x")])]
    records = [
        make_record(100, student_id="a"),
        make_record(50, minutes=1, student_id="a"),
        make_record(20, minutes=2, student_id="b"),
    ]

    stats = overall_stats(students, notes, records)

    assert (stats.total_students, stats.total_notes, stats.total_attempts) == (2, 1, 3)
    assert stats.average_score == 57
    assert per_student_averages(records) == {"a": 75, "b": 20}
    assert overall_stats([], [], []).average_score == 0
