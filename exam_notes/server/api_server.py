"""FastAPI server that exposes the admin and student endpoints."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import Iterator

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field, StrictInt
import uvicorn

from exam_notes.constants.about import APP_ABOUT_TEXT, APP_NAME, APP_VERSION
from exam_notes.constants.network_constants import ALLOWED_ORIGINS, DEFAULT_HOST, DEFAULT_PORT
from exam_notes.constants.quiz_constants import DEFAULT_QUESTION_COUNT, DEFAULT_QUIZ_TIME_LIMIT_SECONDS
from exam_notes.core.bulk_importer import BulkImportError
from exam_notes.core.models import (
    Category,
    Difficulty,
    Note,
    NotePage,
    Question,
    QuizSession,
    Student,
    Subject,
)
from exam_notes.core.note_renderer import renderer
from exam_notes.core.services.document_store import RecordNotFoundError
from exam_notes.core.services.note_catalog import SORT_RECENT
from exam_notes.core.services.score_calculator import score_band, score_message
from exam_notes.core.snapshot_io import to_jsonable
from exam_notes.core.study_manager import StudyManager

logger = logging.getLogger(__name__)


class CategoryPayload(BaseModel):
    name: str
    name_en: str = ""
    name_si: str = ""
    description: str = ""
    thumbnail: str | None = None


class SubjectPayload(CategoryPayload):
    category_id: str


class NotePagePayload(BaseModel):
    page_number: int
    content: str


class NotePayload(BaseModel):
    """Payload schema for creating or editing a note."""

    title: str
    subject_id: str
    category_id: str
    pages: list[NotePagePayload] = Field(default_factory=list)
    content: str | None = None
    title_en: str = ""
    title_si: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    estimated_read_time: int = 0
    tags: list[str] = Field(default_factory=list)
    assigned_students: list[str] = Field(default_factory=list)
    thumbnail: str | None = None
    created_by: str = "admin"


class QuestionPayload(BaseModel):
    question_text: str
    options: list[str]
    correct_option_index: int
    note_id: str
    subject_id: str
    explanation: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    points: int = 1
    time_limit_seconds: int | None = None
    assigned_students: list[str] = Field(default_factory=list)
    created_by: str = "admin"


class StudentPayload(BaseModel):
    name: str
    email: str


class LoginPayload(BaseModel):
    email: str


class StartQuizPayload(BaseModel):
    """Payload schema for starting a quiz."""

    student_id: str
    note_id: str | None = None
    subject_id: str | None = None
    max_count: int = DEFAULT_QUESTION_COUNT


class SubmitQuizPayload(BaseModel):
    """Payload schema for submitted answers; ``None`` marks an unanswered question."""

    selected_option_indices: list[StrictInt | None]
    time_spent_seconds: list[StrictInt] | None = None


class HighlightPayload(BaseModel):
    text: str
    color: str | None = None
    note: str | None = None


class ReadingProgressPayload(BaseModel):
    current_page: int
    progress: float = Field(allow_inf_nan=False)
    reading_time_seconds: int = 0
    words_read: int = 0


class BulkImportPayload(BaseModel):
    """Raw JSON text as pasted or uploaded by an admin."""

    json_content: str
    created_by: str = "admin"


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Map domain exceptions onto HTTP status codes."""
    try:
        yield
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (ValueError, BulkImportError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


def _note_to_dict(note: Note) -> dict[str, object]:
    payload = to_jsonable(note)
    payload["content"] = note.content
    return payload


def _session_to_dict(session: QuizSession) -> dict[str, object]:
    """Quiz as handed to the student; correct answers stay on the server."""
    return {
        "id": session.id,
        "student_id": session.student_id,
        "note_id": session.note_id,
        "subject_id": session.subject_id,
        "started_at": session.started_at.isoformat(),
        "time_limit_seconds": DEFAULT_QUIZ_TIME_LIMIT_SECONDS,
        "questions": [
            {
                "id": question.id,
                "question_html": renderer.render_fragment(question.question_text),
                "options": question.options,
                "difficulty": question.difficulty.value,
                "points": question.points,
                "time_limit_seconds": question.time_limit_seconds,
            }
            for question in session.questions
        ],
    }


def _note_from_payload(payload: NotePayload) -> Note:
    pages = [NotePage(page_number=p.page_number, content=p.content) for p in payload.pages]
    if not pages and payload.content:
        pages = [NotePage(page_number=1, content=payload.content)]
    return Note(
        id="",
        title=payload.title,
        subject_id=payload.subject_id,
        category_id=payload.category_id,
        pages=pages,
        title_en=payload.title_en,
        title_si=payload.title_si,
        difficulty=payload.difficulty,
        estimated_read_time=payload.estimated_read_time,
        tags=payload.tags,
        assigned_students=payload.assigned_students,
        thumbnail=payload.thumbnail,
        created_by=payload.created_by,
    )


def _get_study_manager_dependency(study_manager: StudyManager):
    def dependency() -> StudyManager:
        return study_manager

    return dependency


def create_api_app(study_manager: StudyManager) -> FastAPI:
    """Create a FastAPI application wired to the provided study manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION, description=APP_ABOUT_TEXT)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    manager_dep = _get_study_manager_dependency(study_manager)

    @app.get("/health")
    def health() -> dict[str, object]:
        return {"status": "ok", "app": APP_NAME, "version": APP_VERSION}

    # --- Categories ---

    @app.get("/categories")
    def list_categories(manager: StudyManager = Depends(manager_dep)) -> list[dict[str, object]]:
        return [to_jsonable(c) for c in manager.list_categories()]

    @app.post("/categories", status_code=201)
    def create_category(
        payload: CategoryPayload, manager: StudyManager = Depends(manager_dep)
    ) -> dict[str, object]:
        with _translate_errors():
            return to_jsonable(manager.add_category(Category(id="", **payload.model_dump())))

    @app.put("/categories/{category_id}")
    def update_category(
        category_id: str, payload: CategoryPayload, manager: StudyManager = Depends(manager_dep)
    ) -> dict[str, object]:
        with _translate_errors():
            return to_jsonable(manager.update_category(category_id, Category(id="", **payload.model_dump())))

    @app.delete("/categories/{category_id}", status_code=204)
    def delete_category(category_id: str, manager: StudyManager = Depends(manager_dep)) -> None:
        with _translate_errors():
            manager.delete_category(category_id)

    # --- Subjects ---

    @app.get("/subjects")
    def list_subjects(
        category_id: str | None = None, manager: StudyManager = Depends(manager_dep)
    ) -> list[dict[str, object]]:
        counts = manager.note_counts_by_subject()
        return [
            {**to_jsonable(s), "note_count": counts.get(s.id, 0)}
            for s in manager.list_subjects(category_id)
        ]

    @app.post("/subjects", status_code=201)
    def create_subject(payload: SubjectPayload, manager: StudyManager = Depends(manager_dep)) -> dict[str, object]:
        with _translate_errors():
            return to_jsonable(manager.add_subject(Subject(id="", **payload.model_dump())))

    @app.put("/subjects/{subject_id}")
    def update_subject(
        subject_id: str, payload: SubjectPayload, manager: StudyManager = Depends(manager_dep)
    ) -> dict[str, object]:
        with _translate_errors():
            return to_jsonable(manager.update_subject(subject_id, Subject(id="", **payload.model_dump())))

    @app.delete("/subjects/{subject_id}", status_code=204)
    def delete_subject(subject_id: str, manager: StudyManager = Depends(manager_dep)) -> None:
        with _translate_errors():
            manager.delete_subject(subject_id)

    # --- Notes ---

    @app.get("/notes")
    def list_notes(
        student_id: str | None = None,
        search: str = "",
        subject_id: str | None = None,
        difficulty: Difficulty | None = None,
        sort_by: str = SORT_RECENT,
        manager: StudyManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        with _translate_errors():
            notes = manager.list_notes(student_id, search, subject_id, difficulty, sort_by)
        return [_note_to_dict(note) for note in notes]

    @app.get("/notes/{note_id}")
    def get_note(note_id: str, manager: StudyManager = Depends(manager_dep)) -> dict[str, object]:
        with _translate_errors():
            return _note_to_dict(manager.get_note(note_id))

    @app.get("/notes/{note_id}/pages/{page_number}/html", response_class=HTMLResponse)
    def render_note_page(
        note_id: str,
        page_number: int,
        student_id: str | None = None,
        full_document: bool = False,
        manager: StudyManager = Depends(manager_dep),
    ) -> str:
        with _translate_errors():
            fragment = manager.render_note_page(note_id, page_number, student_id)
            if full_document:
                return renderer.wrap_with_mathjax(fragment, title=manager.get_note(note_id).title)
        return fragment

    @app.post("/notes", status_code=201)
    def create_note(
        payload: NotePayload,
        estimate_read_time: bool = False,
        manager: StudyManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            return _note_to_dict(manager.add_note(_note_from_payload(payload), estimate_read_time))

    @app.put("/notes/{note_id}")
    def update_note(
        note_id: str,
        payload: NotePayload,
        estimate_read_time: bool = False,
        manager: StudyManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            return _note_to_dict(manager.update_note(note_id, _note_from_payload(payload), estimate_read_time))

    @app.delete("/notes/{note_id}", status_code=204)
    def delete_note(note_id: str, manager: StudyManager = Depends(manager_dep)) -> None:
        with _translate_errors():
            manager.delete_note(note_id)

    # --- Questions ---

    @app.get("/questions")
    def list_questions(
        note_id: str | None = None,
        subject_id: str | None = None,
        manager: StudyManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        return [to_jsonable(q) for q in manager.list_questions(note_id, subject_id)]

    @app.post("/questions", status_code=201)
    def create_question(
        payload: QuestionPayload, manager: StudyManager = Depends(manager_dep)
    ) -> dict[str, object]:
        with _translate_errors():
            return to_jsonable(manager.add_question(Question(id="", **payload.model_dump())))

    @app.put("/questions/{question_id}")
    def update_question(
        question_id: str, payload: QuestionPayload, manager: StudyManager = Depends(manager_dep)
    ) -> dict[str, object]:
        with _translate_errors():
            return to_jsonable(manager.update_question(question_id, Question(id="", **payload.model_dump())))

    @app.delete("/questions/{question_id}", status_code=204)
    def delete_question(question_id: str, manager: StudyManager = Depends(manager_dep)) -> None:
        with _translate_errors():
            manager.delete_question(question_id)

    # --- Bulk import and seeding ---

    @app.post("/import/notes", status_code=201)
    def import_notes(payload: BulkImportPayload, manager: StudyManager = Depends(manager_dep)) -> dict[str, object]:
        with _translate_errors():
            notes = manager.import_notes(payload.json_content, payload.created_by)
        return {"imported": len(notes), "ids": [note.id for note in notes]}

    @app.post("/import/questions", status_code=201)
    def import_questions(
        payload: BulkImportPayload, manager: StudyManager = Depends(manager_dep)
    ) -> dict[str, object]:
        with _translate_errors():
            questions = manager.import_questions(payload.json_content, payload.created_by)
        return {"imported": len(questions), "ids": [question.id for question in questions]}

    @app.post("/admin/seed", status_code=201)
    def seed(manager: StudyManager = Depends(manager_dep)) -> dict[str, int]:
        with _translate_errors():
            return manager.seed_sample_data()

    # --- Students ---

    @app.get("/students")
    def list_students(manager: StudyManager = Depends(manager_dep)) -> list[dict[str, object]]:
        return [to_jsonable(s) for s in manager.list_students()]

    @app.post("/students", status_code=201)
    def create_student(payload: StudentPayload, manager: StudyManager = Depends(manager_dep)) -> dict[str, object]:
        with _translate_errors():
            return to_jsonable(manager.add_student(Student(id="", name=payload.name, email=payload.email)))

    @app.post("/students/login")
    def student_login(payload: LoginPayload, manager: StudyManager = Depends(manager_dep)) -> dict[str, object]:
        with _translate_errors():
            return to_jsonable(manager.student_login(payload.email))

    @app.put("/students/{student_id}")
    def update_student(
        student_id: str, payload: StudentPayload, manager: StudyManager = Depends(manager_dep)
    ) -> dict[str, object]:
        with _translate_errors():
            updated = manager.update_student(student_id, Student(id="", name=payload.name, email=payload.email))
        return to_jsonable(updated)

    @app.delete("/students/{student_id}", status_code=204)
    def delete_student(student_id: str, manager: StudyManager = Depends(manager_dep)) -> None:
        with _translate_errors():
            manager.delete_student(student_id)

    # --- Quizzes and progress ---

    @app.post("/quizzes", status_code=201)
    def start_quiz(payload: StartQuizPayload, manager: StudyManager = Depends(manager_dep)) -> dict[str, object]:
        with _translate_errors():
            session = manager.start_quiz(
                payload.student_id,
                note_id=payload.note_id,
                subject_id=payload.subject_id,
                max_count=payload.max_count,
            )
        return _session_to_dict(session)

    @app.post("/quizzes/{session_id}/submit")
    def submit_quiz(
        session_id: str, payload: SubmitQuizPayload, manager: StudyManager = Depends(manager_dep)
    ) -> dict[str, object]:
        with _translate_errors():
            session = manager.get_quiz_session(session_id)
            record, result = manager.submit_quiz(
                session_id, payload.selected_option_indices, payload.time_spent_seconds
            )
        explanations = {q.id: (q.correct_option_index, q.explanation) for q in session.questions}
        return {
            "record_id": record.id,
            "score": result.score,
            "correct": result.correct,
            "incorrect": result.incorrect,
            "unanswered": result.unanswered,
            "total": result.total,
            "band": score_band(result.score),
            "message": score_message(result.score),
            "answers": [
                {
                    **to_jsonable(attempt),
                    "correct_option_index": explanations[attempt.question_id][0],
                    "explanation": explanations[attempt.question_id][1],
                }
                for attempt in result.attempts
            ],
        }

    @app.get("/students/{student_id}/progress")
    def student_progress(
        student_id: str,
        note_id: str | None = None,
        subject_id: str | None = None,
        manager: StudyManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            manager.get_student(student_id)
        summary = manager.progress_for(student_id, note_id=note_id, subject_id=subject_id)
        totals = manager.reading_totals(student_id)
        return {
            **to_jsonable(summary),
            "reading": {
                "total_reading_time_seconds": totals.total_reading_time_seconds,
                "total_words_read": totals.total_words_read,
                "notes_started": totals.notes_started,
                "last_note_id": totals.last_note_id,
                "last_read": totals.last_read.isoformat() if totals.last_read else None,
            },
        }

    @app.get("/students/{student_id}/quizzes")
    def student_quiz_history(
        student_id: str,
        limit: int = Query(default=20, ge=1),
        manager: StudyManager = Depends(manager_dep),
    ) -> list[dict[str, object]]:
        return [to_jsonable(record) for record in manager.quiz_history(student_id)[:limit]]

    @app.get("/performance")
    def performance(manager: StudyManager = Depends(manager_dep)) -> dict[str, object]:
        stats, averages = manager.performance_overview()
        return {**to_jsonable(stats), "student_averages": averages}

    # --- Preferences ---

    @app.get("/students/{student_id}/highlights")
    def all_highlights(student_id: str, manager: StudyManager = Depends(manager_dep)) -> list[dict[str, object]]:
        return [
            {**to_jsonable(highlight), "note_id": note_id}
            for note_id, highlight in manager.all_highlights(student_id)
        ]

    @app.get("/students/{student_id}/notes/{note_id}/highlights")
    def note_highlights(
        student_id: str, note_id: str, manager: StudyManager = Depends(manager_dep)
    ) -> list[dict[str, object]]:
        return [to_jsonable(h) for h in manager.get_highlights(student_id, note_id)]

    @app.post("/students/{student_id}/notes/{note_id}/highlights", status_code=201)
    def add_highlight(
        student_id: str,
        note_id: str,
        payload: HighlightPayload,
        manager: StudyManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            highlight = manager.add_highlight(student_id, note_id, payload.text, payload.color, payload.note)
        return to_jsonable(highlight)

    @app.delete("/students/{student_id}/notes/{note_id}/highlights/{highlight_id}", status_code=204)
    def remove_highlight(
        student_id: str, note_id: str, highlight_id: str, manager: StudyManager = Depends(manager_dep)
    ) -> None:
        with _translate_errors():
            manager.remove_highlight(student_id, note_id, highlight_id)

    @app.get("/students/{student_id}/notes/{note_id}/reading-progress")
    def get_reading_progress(
        student_id: str, note_id: str, manager: StudyManager = Depends(manager_dep)
    ) -> dict[str, object] | None:
        entry = manager.get_reading_progress(student_id, note_id)
        return to_jsonable(entry) if entry else None

    @app.put("/students/{student_id}/notes/{note_id}/reading-progress")
    def save_reading_progress(
        student_id: str,
        note_id: str,
        payload: ReadingProgressPayload,
        manager: StudyManager = Depends(manager_dep),
    ) -> dict[str, object]:
        with _translate_errors():
            entry = manager.save_reading_progress(student_id, note_id, **payload.model_dump())
        return to_jsonable(entry)

    @app.get("/students/{student_id}/bookmarks")
    def get_bookmarks(student_id: str, manager: StudyManager = Depends(manager_dep)) -> dict[str, object]:
        return {"note_ids": manager.get_bookmarks(student_id)}

    @app.post("/students/{student_id}/bookmarks/{note_id}")
    def toggle_bookmark(
        student_id: str, note_id: str, manager: StudyManager = Depends(manager_dep)
    ) -> dict[str, object]:
        with _translate_errors():
            bookmarked = manager.toggle_bookmark(student_id, note_id)
        return {"note_id": note_id, "bookmarked": bookmarked}

    return app


def run_api_server(
    study_manager: StudyManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API in the foreground until interrupted."""
    app = create_api_app(study_manager)
    logger.info("Serving %s on %s:%d", APP_NAME, host, port)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    uvicorn.Server(config).run()
