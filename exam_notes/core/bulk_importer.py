"""Bulk import of notes and questions from JSON documents.

Both formats are a JSON array of objects. Notes:

    [
      {
        "title": "Newton's Laws",
        "subjectId": "<subject id>",
        "categoryId": "<category id>",
        "pages": [{"pageNumber": 1, "content": "First law ..."}],
        "difficulty": "medium",
        "tags": ["mechanics"]
      }
    ]

A note may give a single ``content`` string instead of ``pages``; it becomes a
one-page note. Questions:

    [
      {
        "question": "What is the SI unit of force?",
        "options": ["Joule", "Newton", "Watt", "Pascal"],
        "correctAnswer": 1,
        "explanation": "...",
        "noteId": "<note id>",
        "subjectId": "<subject id>"
      }
    ]

Keys use the camelCase spelling the browser client uploads. The whole upload is
validated before anything is returned, so a bad item rejects the batch.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from exam_notes.constants.quiz_constants import DEFAULT_QUESTION_POINTS, MIN_OPTION_COUNT
from exam_notes.core.models import Difficulty, Note, NotePage, Question


class BulkImportError(Exception):
    """Raised when an uploaded JSON document cannot be imported."""


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


Text = Annotated[StrictStr, AfterValidator(_not_blank)]
PositiveInt = Annotated[StrictInt, Field(gt=0)]


class ImportItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    difficulty: Difficulty = Difficulty.MEDIUM
    assigned_students: list[StrictStr] = Field(default_factory=list)

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalise_difficulty(cls, value: Any) -> Any:
        if value is None:
            return Difficulty.MEDIUM
        return value.lower() if isinstance(value, str) else value


class PageImport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page_number: StrictInt | None = None
    content: Text


class NoteImport(ImportItem):
    """One uploaded note; either ``pages`` or a single ``content`` string."""

    title: Text
    subject_id: Text
    category_id: Text
    pages: list[PageImport] = Field(default_factory=list)
    content: StrictStr | None = None
    title_en: StrictStr | None = None
    title_si: StrictStr | None = None
    estimated_read_time: StrictInt = 0
    tags: list[StrictStr] = Field(default_factory=list)

    @model_validator(mode="after")
    def require_body(self) -> NoteImport:
        if not self.pages and not (self.content and self.content.strip()):
            raise ValueError("Either a pages array or a content string is required.")
        return self

    def to_note(self, created_by: str) -> Note:
        if self.pages:
            pages = [
                NotePage(page_number=page.page_number or index, content=page.content)
                for index, page in enumerate(self.pages, start=1)
            ]
        else:
            pages = [NotePage(page_number=1, content=self.content)]
        return Note(
            id="",
            title=self.title,
            title_en=self.title_en or "",
            title_si=self.title_si or "",
            subject_id=self.subject_id,
            category_id=self.category_id,
            pages=pages,
            difficulty=self.difficulty,
            estimated_read_time=self.estimated_read_time,
            tags=list(self.tags),
            assigned_students=list(self.assigned_students),
            created_by=created_by,
        )


class QuestionImport(ImportItem):
    question: Text
    options: Annotated[list[StrictStr], Field(min_length=MIN_OPTION_COUNT)]
    correct_answer: StrictInt
    note_id: Text
    subject_id: Text
    explanation: StrictStr | None = None
    points: PositiveInt = DEFAULT_QUESTION_POINTS
    time_limit: PositiveInt | None = None

    @model_validator(mode="after")
    def check_answer_index(self) -> QuestionImport:
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError("correctAnswer must be an index into options.")
        return self

    def to_question(self, created_by: str) -> Question:
        return Question(
            id="",
            question_text=self.question,
            options=list(self.options),
            correct_option_index=self.correct_answer,
            explanation=self.explanation or "",
            note_id=self.note_id,
            subject_id=self.subject_id,
            difficulty=self.difficulty,
            points=self.points,
            time_limit_seconds=self.time_limit,
            assigned_students=list(self.assigned_students),
            created_by=created_by,
        )


_NOTE_LIST = TypeAdapter(list[NoteImport])
_QUESTION_LIST = TypeAdapter(list[QuestionImport])


def load_items(source: str | Path) -> list[dict[str, Any]]:
    """Parse a JSON array from raw text or from a file path."""
    text = source.read_text(encoding="utf-8") if isinstance(source, Path) else source
    if not text.strip():
        raise BulkImportError("Upload is empty.")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BulkImportError(f"Invalid JSON: {exc.msg} (line {exc.lineno}).") from exc
    if not isinstance(data, list):
        raise BulkImportError("JSON must be an array of objects.")
    if not all(isinstance(item, dict) for item in data):
        raise BulkImportError("Every array entry must be an object.")
    return data


def parse_notes(items: list[dict[str, Any]], created_by: str = "admin") -> list[Note]:
    parsed = _validate(_NOTE_LIST, items, "Note")
    return [item.to_note(created_by) for item in parsed]


def parse_questions(items: list[dict[str, Any]], created_by: str = "admin") -> list[Question]:
    parsed = _validate(_QUESTION_LIST, items, "Question")
    return [item.to_question(created_by) for item in parsed]


def _validate(adapter: TypeAdapter, items: list[dict[str, Any]], label: str) -> list[Any]:
    """Run the adapter and report the first problem against its 1-based item number."""
    try:
        return adapter.validate_python(items)
    except ValidationError as exc:
        error = exc.errors()[0]
        position, *path = error["loc"]
        where = ".".join(str(part) for part in path)
        detail = f"{where}: {error['msg']}" if where else error["msg"]
        raise BulkImportError(f"{label} #{position + 1}: {detail}") from exc
