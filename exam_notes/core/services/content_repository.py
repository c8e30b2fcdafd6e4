"""Service for managing categories, subjects, notes, questions and students."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
import math

from exam_notes.constants.quiz_constants import MIN_OPTION_COUNT
from exam_notes.constants.storage_constants import (
    COLLECTION_CATEGORIES,
    COLLECTION_NOTES,
    COLLECTION_QUESTIONS,
    COLLECTION_STUDENTS,
    COLLECTION_SUBJECTS,
    WORDS_PER_MINUTE,
)
from exam_notes.core.models import (
    Category,
    Note,
    NotePage,
    Question,
    Student,
    Subject,
    utcnow,
)
from exam_notes.core.services.document_store import DocumentStore


class ContentRepository:
    """Validates content records and keeps them in the document store.

    Records handed to ``add_*`` may carry any id; the repository assigns a fresh
    one. ``update_*`` keeps the stored id and creation time.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    # --- Categories ---

    def list_categories(self) -> list[Category]:
        return self._store.list(COLLECTION_CATEGORIES)

    def get_category(self, category_id: str) -> Category:
        return self._store.get(COLLECTION_CATEGORIES, category_id)

    def add_category(self, category: Category) -> Category:
        prepared = self._prepare_category(category)
        prepared.id = self._store.new_id()
        prepared.created_at = utcnow()
        return self._store.insert(COLLECTION_CATEGORIES, prepared)

    def update_category(self, category_id: str, category: Category) -> Category:
        existing = self.get_category(category_id)
        prepared = self._prepare_category(category)
        prepared.id = existing.id
        prepared.created_at = existing.created_at
        return self._store.replace(COLLECTION_CATEGORIES, prepared)

    def delete_category(self, category_id: str) -> None:
        self._store.delete(COLLECTION_CATEGORIES, category_id)

    # --- Subjects ---

    def list_subjects(self, category_id: str | None = None) -> list[Subject]:
        subjects = self._store.list(COLLECTION_SUBJECTS)
        if category_id is None:
            return subjects
        return [s for s in subjects if s.category_id == category_id]

    def get_subject(self, subject_id: str) -> Subject:
        return self._store.get(COLLECTION_SUBJECTS, subject_id)

    def add_subject(self, subject: Subject) -> Subject:
        prepared = self._prepare_subject(subject)
        prepared.id = self._store.new_id()
        prepared.created_at = prepared.updated_at = utcnow()
        return self._store.insert(COLLECTION_SUBJECTS, prepared)

    def update_subject(self, subject_id: str, subject: Subject) -> Subject:
        existing = self.get_subject(subject_id)
        prepared = self._prepare_subject(subject)
        prepared.id = existing.id
        prepared.created_at = existing.created_at
        prepared.updated_at = utcnow()
        return self._store.replace(COLLECTION_SUBJECTS, prepared)

    def delete_subject(self, subject_id: str) -> None:
        self._store.delete(COLLECTION_SUBJECTS, subject_id)

    # --- Notes ---

    def list_notes(self) -> list[Note]:
        return self._store.list(COLLECTION_NOTES)

    def get_note(self, note_id: str) -> Note:
        return self._store.get(COLLECTION_NOTES, note_id)

    def add_note(self, note: Note, estimate_read_time: bool = False) -> Note:
        prepared = self._prepare_note(note, estimate_read_time)
        prepared.id = self._store.new_id()
        prepared.created_at = prepared.updated_at = utcnow()
        return self._store.insert(COLLECTION_NOTES, prepared)

    def update_note(self, note_id: str, note: Note, estimate_read_time: bool = False) -> Note:
        existing = self.get_note(note_id)
        prepared = self._prepare_note(note, estimate_read_time)
        prepared.id = existing.id
        prepared.created_at = existing.created_at
        prepared.updated_at = utcnow()
        return self._store.replace(COLLECTION_NOTES, prepared)

    def delete_note(self, note_id: str) -> None:
        # Questions keep their note_id; they simply stop matching any note.
        self._store.delete(COLLECTION_NOTES, note_id)

    # --- Questions ---

    def list_questions(self) -> list[Question]:
        return self._store.list(COLLECTION_QUESTIONS)

    def get_question(self, question_id: str) -> Question:
        return self._store.get(COLLECTION_QUESTIONS, question_id)

    def add_question(self, question: Question) -> Question:
        prepared = self._prepare_question(question)
        prepared.id = self._store.new_id()
        prepared.created_at = utcnow()
        return self._store.insert(COLLECTION_QUESTIONS, prepared)

    def update_question(self, question_id: str, question: Question) -> Question:
        existing = self.get_question(question_id)
        prepared = self._prepare_question(question)
        prepared.id = existing.id
        prepared.created_at = existing.created_at
        return self._store.replace(COLLECTION_QUESTIONS, prepared)

    def delete_question(self, question_id: str) -> None:
        self._store.delete(COLLECTION_QUESTIONS, question_id)

    # --- Students ---

    def list_students(self) -> list[Student]:
        return self._store.list(COLLECTION_STUDENTS)

    def get_student(self, student_id: str) -> Student:
        return self._store.get(COLLECTION_STUDENTS, student_id)

    def find_student_by_email(self, email: str) -> Student | None:
        wanted = email.strip().lower()
        return next((s for s in self.list_students() if s.email == wanted), None)

    def add_student(self, student: Student) -> Student:
        prepared = self._prepare_student(student, current_id=None)
        prepared.id = self._store.new_id()
        prepared.created_at = utcnow()
        return self._store.insert(COLLECTION_STUDENTS, prepared)

    def update_student(self, student_id: str, student: Student) -> Student:
        existing = self.get_student(student_id)
        prepared = self._prepare_student(student, current_id=existing.id)
        prepared.id = existing.id
        prepared.created_at = existing.created_at
        prepared.last_login = existing.last_login
        return self._store.replace(COLLECTION_STUDENTS, prepared)

    def delete_student(self, student_id: str) -> None:
        self._store.delete(COLLECTION_STUDENTS, student_id)

    def record_login(self, student_id: str, when: datetime | None = None) -> Student:
        student = self.get_student(student_id)
        student.last_login = when or utcnow()
        return student

    # --- Validation ---

    def _prepare_category(self, category: Category) -> Category:
        name = _required_text(category.name, "Category name")
        return replace(
            category,
            name=name,
            name_en=category.name_en.strip() or name,
            name_si=category.name_si.strip(),
            description=category.description.strip(),
        )

    def _prepare_subject(self, subject: Subject) -> Subject:
        name = _required_text(subject.name, "Subject name")
        if not self._store.exists(COLLECTION_CATEGORIES, subject.category_id):
            raise ValueError(f"Unknown category '{subject.category_id}'.")
        return replace(
            subject,
            name=name,
            name_en=subject.name_en.strip() or name,
            name_si=subject.name_si.strip(),
            description=subject.description.strip(),
        )

    def _prepare_note(self, note: Note, estimate_read_time: bool) -> Note:
        title = _required_text(note.title, "Note title")
        if not note.subject_id.strip() or not note.category_id.strip():
            raise ValueError("Note must reference a subject and a category.")

        contents = [page.content.strip() for page in sorted(note.pages, key=lambda p: p.page_number)]
        if not contents or any(not content for content in contents):
            raise ValueError("Note must have at least one page and pages cannot be empty.")
        pages = [NotePage(page_number=index, content=text) for index, text in enumerate(contents, start=1)]

        read_time = note.estimated_read_time
        if estimate_read_time or read_time <= 0:
            read_time = estimate_reading_minutes(" ".join(contents))

        return replace(
            note,
            title=title,
            title_en=note.title_en.strip() or title,
            title_si=note.title_si.strip(),
            pages=pages,
            estimated_read_time=read_time,
            tags=_clean_list(note.tags),
            assigned_students=_clean_list(note.assigned_students),
        )

    @staticmethod
    def _prepare_question(question: Question) -> Question:
        text = _required_text(question.question_text, "Question text")
        options = [option.strip() for option in question.options]
        if len(options) < MIN_OPTION_COUNT:
            raise ValueError(f"Each question needs at least {MIN_OPTION_COUNT} options.")
        if any(not option for option in options):
            raise ValueError("Option text cannot be empty.")
        if not 0 <= question.correct_option_index < len(options):
            raise ValueError("Correct option index is out of range.")
        if not question.note_id.strip() or not question.subject_id.strip():
            raise ValueError("Question must reference a note and a subject.")
        if question.points <= 0:
            raise ValueError("Points must be a positive integer.")
        if question.time_limit_seconds is not None and question.time_limit_seconds <= 0:
            raise ValueError("Time limit must be a positive integer.")
        return replace(
            question,
            question_text=text,
            options=options,
            explanation=question.explanation.strip(),
            assigned_students=_clean_list(question.assigned_students),
        )

    def _prepare_student(self, student: Student, current_id: str | None) -> Student:
        name = _required_text(student.name, "Student name")
        email = _required_text(student.email, "Email").lower()
        if "@" not in email:
            raise ValueError("Email address is not valid.")
        clash = self.find_student_by_email(email)
        if clash is not None and clash.id != current_id:
            raise ValueError(f"A student with email '{email}' already exists.")
        return replace(student, name=name, email=email, role="student")


def estimate_reading_minutes(text: str) -> int:
    """Reading time in whole minutes at the configured reading speed, at least one."""
    words = len(text.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))


def _required_text(value: str, label: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{label} must not be empty.")
    return cleaned


def _clean_list(values: list[str]) -> list[str]:
    return [value.strip() for value in values if value.strip()]

