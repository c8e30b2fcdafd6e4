from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from exam_notes.core.models import Difficulty, Note, NotePage, Subject
from exam_notes.core.services import note_catalog

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _note(note_id, title, difficulty=Difficulty.MEDIUM, subject_id="s1", days=0, tags=None, assigned=None):
    return Note(
        id=note_id,
        title=title,
        subject_id=subject_id,
        category_id="c1",
        pages=[NotePage(1, "text")],
        difficulty=difficulty,
        tags=tags or [],
        assigned_students=assigned or [],
        updated_at=START + timedelta(days=days),
    )


@pytest.fixture
def notes():
    return [
        _note("a", "Optics", Difficulty.HARD, days=1, tags=["light"]),
        _note("b", "atoms", Difficulty.EASY, subject_id="s2", days=3),
        _note("c", "Kinematics", Difficulty.MEDIUM, days=2, assigned=["student-9"]),
    ]


def test_visibility_follows_assignment(notes):
    assert [n.id for n in note_catalog.visible_notes(notes, "student-1")] == ["a", "b"]
    assert [n.id for n in note_catalog.visible_notes(notes, "student-9")] == ["a", "b", "c"]


def test_search_matches_titles_and_tags_case_insensitively(notes):
    assert [n.id for n in note_catalog.filter_notes(notes, search="LIGHT")] == ["a"]
    assert [n.id for n in note_catalog.filter_notes(notes, search="kine")] == ["c"]
    assert [n.id for n in note_catalog.filter_notes(notes, subject_id="s2")] == ["b"]
    assert [n.id for n in note_catalog.filter_notes(notes, difficulty=Difficulty.HARD)] == ["a"]


def test_sort_orders(notes):
    assert [n.id for n in note_catalog.sort_notes(notes, "recent")] == ["b", "c", "a"]
    assert [n.id for n in note_catalog.sort_notes(notes, "title")] == ["b", "c", "a"]
    assert [n.id for n in note_catalog.sort_notes(notes, "difficulty")] == ["b", "c", "a"]
    by_progress = note_catalog.sort_notes(notes, "progress", {"a": 80, "c": 20})
    assert [n.id for n in by_progress] == ["a", "c", "b"]


def test_unknown_sort_rejected(notes):
    with pytest.raises(ValueError):
        note_catalog.sort_notes(notes, "popularity")


def test_note_counts_by_subject(notes):
    subjects = [Subject(id="s1", name="Physics", category_id="c1"), Subject(id="s3", name="Art", category_id="c1")]

    assert note_catalog.note_counts_by_subject(subjects, notes) == {"s1": 2, "s3": 0}
