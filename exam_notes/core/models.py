"""Domain models for the study application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Difficulty(str, Enum):
    """Difficulty level shared by notes and questions."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_RANK[self]


_DIFFICULTY_RANK = {Difficulty.EASY: 1, Difficulty.MEDIUM: 2, Difficulty.HARD: 3}


@dataclass(slots=True)
class Category:
    """Top-level grouping of subjects (for example Science or Commerce)."""

    id: str
    name: str
    name_en: str = ""
    name_si: str = ""
    description: str = ""
    thumbnail: str | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class Subject:
    """A subject that belongs to a category."""

    id: str
    name: str
    category_id: str
    name_en: str = ""
    name_si: str = ""
    description: str = ""
    thumbnail: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class NotePage:
    page_number: int
    content: str


@dataclass(slots=True)
class Note:
    """A study document made of one or more ordered pages."""

    id: str
    title: str
    subject_id: str
    category_id: str
    pages: list[NotePage]
    title_en: str = ""
    title_si: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    estimated_read_time: int = 5
    tags: list[str] = field(default_factory=list)
    assigned_students: list[str] = field(default_factory=list)
    thumbnail: str | None = None
    created_by: str = "admin"
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def content(self) -> str:
        # First page text, kept for clients that predate multi-page notes.
        return self.pages[0].content if self.pages else ""

    def is_visible_to(self, student_id: str | None) -> bool:
        return not self.assigned_students or student_id in self.assigned_students


@dataclass(slots=True)
class Question:
    """Multiple-choice question tied to a note and a subject."""

    id: str
    question_text: str
    options: list[str]
    correct_option_index: int
    note_id: str
    subject_id: str
    explanation: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    points: int = 1
    time_limit_seconds: int | None = None
    assigned_students: list[str] = field(default_factory=list)
    created_by: str = "admin"
    created_at: datetime = field(default_factory=utcnow)

    def is_visible_to(self, student_id: str | None) -> bool:
        return not self.assigned_students or student_id in self.assigned_students


@dataclass(slots=True)
class Student:
    id: str
    name: str
    email: str
    role: str = "student"
    created_at: datetime = field(default_factory=utcnow)
    last_login: datetime | None = None


@dataclass(frozen=True, slots=True)
class QuizAttemptResult:
    """Outcome of one question at submission time."""

    question_id: str
    selected_option_index: int | None
    is_correct: bool
    time_spent_seconds: int = 0


@dataclass(frozen=True, slots=True)
class QuizRecord:
    """A submitted quiz, stored as part of a student's history."""

    id: str
    student_id: str
    questions_attempted: int
    questions_correct: int
    score: int
    completed_at: datetime
    note_id: str | None = None
    subject_id: str | None = None
    time_spent_seconds: int = 0
    answers: tuple[QuizAttemptResult, ...] = ()


@dataclass(slots=True)
class QuizSession:
    """A quiz handed out to a student and awaiting submission."""

    id: str
    student_id: str
    questions: list[Question]
    started_at: datetime = field(default_factory=utcnow)
    note_id: str | None = None
    subject_id: str | None = None


@dataclass(frozen=True, slots=True)
class ProgressSummary:
    total_attempts: int = 0
    average_score: int = 0
    best_score: int = 0
    last_attempt_at: datetime | None = None


@dataclass(slots=True)
class Highlight:
    """A passage a student marked while reading a note."""

    id: str
    text: str
    color: str = "yellow"
    note: str | None = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class ReadingProgress:
    current_page: int = 0
    progress: int = 0
    reading_time_seconds: int = 0
    words_read: int = 0
    last_read: datetime = field(default_factory=utcnow)
