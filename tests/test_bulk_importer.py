from __future__ import annotations

import json

import pytest

from exam_notes.core.bulk_importer import BulkImportError, load_items, parse_notes, parse_questions
from exam_notes.core.models import Difficulty


def test_load_items_requires_a_json_array(tmp_path):
    with pytest.raises(BulkImportError):
        load_items("")
    with pytest.raises(BulkImportError):
        load_items("{not json")
    with pytest.raises(BulkImportError):
        load_items('{"title": "x"}')
    with pytest.raises(BulkImportError):
        load_items("[1, 2]")

    path = tmp_path / "notes.json"
    path.write_text('[{"title": "x"}]', encoding="utf-8")
    assert load_items(path) == [{"title": "x"}]


def test_notes_with_pages_and_legacy_content():
    items = [
        {
            "title": "Optics",
            "subjectId": "s1",
            "categoryId": "c1",
            "pages": [{"pageNumber": 1, "content": "one"}, {"content": "two"}],
            "difficulty": "HARD",
            "tags": ["light"],
        },
        {"title": "Atoms", "subjectId": "s1", "categoryId": "c1", "content": "legacy body"},
    ]

    optics, atoms = parse_notes(items, created_by="admin-1")

    assert [p.page_number for p in optics.pages] == [1, 2]
    assert optics.difficulty is Difficulty.HARD
    assert optics.created_by == "admin-1"
    assert [p.content for p in atoms.pages] == ["legacy body"]
    assert atoms.difficulty is Difficulty.MEDIUM


def test_note_errors_name_the_item():
    items = [
        {"title": "Ok", "subjectId": "s1", "categoryId": "c1", "content": "fine"},
        {"title": "Broken", "subjectId": "s1", "categoryId": "c1", "pages": [{"content": " "}]},
    ]

    with pytest.raises(BulkImportError, match="Note #2"):
        parse_notes(items)


def test_questions_are_parsed():
    items = json.loads(
        '[{"question": "Unit of force?", "options": ["J", "N"], "correctAnswer": 1,'
        ' "noteId": "n1", "subjectId": "s1", "timeLimit": 30, "points": 2}]'
    )

    (question,) = parse_questions(items)

    assert question.correct_option_index == 1
    assert question.time_limit_seconds == 30
    assert question.points == 2
    assert question.explanation == ""


@pytest.mark.parametrize(
    "broken",
    [
        {"options": ["only"]},
        {"correctAnswer": 2},
        {"correctAnswer": True},
        {"noteId": ""},
        {"difficulty": "impossible"},
        {"timeLimit": -5},
    ],
)
def test_invalid_questions_rejected(broken):
    item = {"question": "Q?", "options": ["a", "b"], "correctAnswer": 0, "noteId": "n1", "subjectId": "s1"}
    item.update(broken)

    with pytest.raises(BulkImportError, match="Question #1"):
        parse_questions([item])


def test_booleans_are_not_accepted_as_numbers():
    note = {"title": "Optics", "subjectId": "s1", "categoryId": "c1", "pages": [{"pageNumber": True, "content": "x"}]}
    question = {
        "question": "Q?",
        "options": ["a", "b"],
        "correctAnswer": 0,
        "noteId": "n1",
        "subjectId": "s1",
        "points": True,
    }

    with pytest.raises(BulkImportError, match=r"Note #1: pages\.0\.pageNumber"):
        parse_notes([note])
    with pytest.raises(BulkImportError, match="Question #1: points"):
        parse_questions([question])


def test_note_needs_pages_or_content():
    with pytest.raises(BulkImportError, match="Note #1"):
        parse_notes([{"title": "Empty", "subjectId": "s1", "categoryId": "c1", "content": "   "}])
