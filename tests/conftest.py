from __future__ import annotations

from datetime import datetime, timedelta, timezone
import random

import pytest

from exam_notes.core.models import Category, Note, NotePage, Question, QuizRecord, Student, Subject
from exam_notes.core.study_manager import StudyManager

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_question():
    def factory(
        question_id: str = "q1",
        correct: int = 0,
        note_id: str = "note-1",
        subject_id: str = "subject-1",
        options: list[str] | None = None,
        assigned_students: list[str] | None = None,
    ) -> Question:
        return Question(
            id=question_id,
            question_text=f"Question {question_id}?",
            options=options or ["A", "B", "C", "D"],
            correct_option_index=correct,
            note_id=note_id,
            subject_id=subject_id,
            assigned_students=assigned_students or [],
        )

    return factory


@pytest.fixture
def make_record():
    def factory(
        score: int,
        minutes: int = 0,
        student_id: str = "student-1",
        note_id: str | None = None,
        subject_id: str | None = None,
    ) -> QuizRecord:
        return QuizRecord(
            id=f"r-{score}-{minutes}",
            student_id=student_id,
            questions_attempted=4,
            questions_correct=score * 4 // 100,
            score=score,
            completed_at=BASE_TIME + timedelta(minutes=minutes),
            note_id=note_id,
            subject_id=subject_id,
        )

    return factory


@pytest.fixture
def manager() -> StudyManager:
    return StudyManager(rng=random.Random(7))


@pytest.fixture
def populated(manager: StudyManager) -> dict[str, object]:
    """A manager holding one category, subject, note with four questions and a student."""
    category = manager.add_category(Category(id="", name="Science"))
    subject = manager.add_subject(Subject(id="", name="Physics", category_id=category.id))
    note = manager.add_note(
        Note(
            id="",
            title="Newton's Laws",
            subject_id=subject.id,
            category_id=category.id,
            pages=[
                NotePage(page_number=1, content="# First law\n\nA body stays at rest."),
                NotePage(page_number=2, content="Force equals **mass times acceleration**."),
            ],
            tags=["mechanics"],
        )
    )
    questions = [
        manager.add_question(
            Question(
                id="",
                question_text=f"Question {index}?",
                options=["w", "x", "y", "z"],
                correct_option_index=correct,
                note_id=note.id,
                subject_id=subject.id,
            )
        )
        for index, correct in enumerate([0, 1, 2, 0])
    ]
    student = manager.add_student(Student(id="", name="Nimal", email="nimal@example.com"))
    return {
        "manager": manager,
        "category": category,
        "subject": subject,
        "note": note,
        "questions": questions,
        "student": student,
    }
