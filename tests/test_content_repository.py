from __future__ import annotations

import pytest

from exam_notes.core.models import Category, Note, NotePage, Question, Student, Subject
from exam_notes.core.services.content_repository import ContentRepository, estimate_reading_minutes
from exam_notes.core.services.document_store import DocumentStore, RecordNotFoundError


@pytest.fixture
def repository() -> ContentRepository:
    return ContentRepository(DocumentStore())


def _note(**overrides) -> Note:
    values = dict(
        id="ignored",
        title="  Atoms ",
        subject_id="s1",
        category_id="c1",
        pages=[NotePage(page_number=5, content="second"), NotePage(page_number=2, content=" first ")],
    )
    values.update(overrides)
    return Note(**values)


def test_category_defaults_english_name(repository):
    created = repository.add_category(Category(id="x", name=" Science "))

    assert created.id != "x"
    assert created.name == "Science"
    assert created.name_en == "Science"
    assert repository.list_categories() == [created]


def test_subject_requires_known_category(repository):
    with pytest.raises(ValueError):
        repository.add_subject(Subject(id="", name="Physics", category_id="missing"))

    category = repository.add_category(Category(id="", name="Science"))
    subject = repository.add_subject(Subject(id="", name="Physics", category_id=category.id))
    assert repository.list_subjects(category.id) == [subject]
    assert repository.list_subjects("other") == []


def test_note_pages_are_sorted_and_renumbered(repository):
    note = repository.add_note(_note())

    assert note.title == "Atoms"
    assert [(p.page_number, p.content) for p in note.pages] == [(1, "first"), (2, "second")]
    assert note.content == "first"


def test_note_rejects_empty_pages(repository):
    with pytest.raises(ValueError):
        repository.add_note(_note(pages=[]))
    with pytest.raises(ValueError):
        repository.add_note(_note(pages=[NotePage(page_number=1, content="   ")]))


def test_note_read_time_estimated_when_missing(repository):
    text = " ".join(["word"] * 450)
    note = repository.add_note(_note(pages=[NotePage(1, text)], estimated_read_time=0))

    assert note.estimated_read_time == 3
    assert estimate_reading_minutes("") == 1


def test_update_note_preserves_id_and_created_at(repository):
    original = repository.add_note(_note())

    updated = repository.update_note(original.id, _note(title="Atomic Structure"))

    assert updated.id == original.id
    assert updated.created_at == original.created_at
    assert updated.updated_at >= original.updated_at
    assert repository.get_note(original.id).title == "Atomic Structure"


@pytest.mark.parametrize(
    "overrides",
    [
        {"question_text": "  "},
        {"options": ["only one"]},
        {"options": ["a", " "]},
        {"correct_option_index": 4},
        {"points": 0},
        {"time_limit_seconds": 0},
        {"note_id": ""},
    ],
)
def test_question_validation(repository, overrides):
    values = dict(
        id="",
        question_text="What is a proton?",
        options=["a", "b", "c", "d"],
        correct_option_index=1,
        note_id="n1",
        subject_id="s1",
    )
    values.update(overrides)

    with pytest.raises(ValueError):
        repository.add_question(Question(**values))


def test_student_email_is_unique_and_normalised(repository):
    first = repository.add_student(Student(id="", name="Nimal", email=" Nimal@Example.com "))

    assert first.email == "nimal@example.com"
    with pytest.raises(ValueError):
        repository.add_student(Student(id="", name="Other", email="NIMAL@example.com"))

    renamed = repository.update_student(first.id, Student(id="", name="Nimal P", email="nimal@example.com"))
    assert renamed.name == "Nimal P"


def test_missing_records_raise_not_found(repository):
    with pytest.raises(RecordNotFoundError):
        repository.get_note("nope")
    with pytest.raises(RecordNotFoundError):
        repository.delete_question("nope")
    with pytest.raises(RecordNotFoundError):
        repository.update_category("nope", Category(id="", name="X"))


def test_record_login_stamps_student():
    store = DocumentStore()
    repository = ContentRepository(store)
    student = repository.add_student(Student(id="", name="Nimal", email="nimal@example.com"))
    assert student.last_login is None

    repository.record_login(student.id)

    assert repository.find_student_by_email(" NIMAL@example.com ").last_login is not None
    assert store.count("students") == 1
