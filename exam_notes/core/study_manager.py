"""Business logic shared by the HTTP API and the command line entry point."""

from __future__ import annotations

from datetime import timedelta
import logging
from pathlib import Path
import random
from threading import Lock

from exam_notes.constants.quiz_constants import DEFAULT_QUESTION_COUNT, QUIZ_SESSION_TTL_SECONDS
from exam_notes.constants.storage_constants import (
    COLLECTION_CATEGORIES,
    COLLECTION_NOTES,
    COLLECTION_QUESTIONS,
    COLLECTION_QUIZ_RECORDS,
    COLLECTION_STUDENTS,
    COLLECTION_SUBJECTS,
)
from exam_notes.core import bulk_importer, seed_data
from exam_notes.core.models import (
    Category,
    Difficulty,
    Highlight,
    Note,
    NotePage,
    ProgressSummary,
    Question,
    QuizRecord,
    QuizSession,
    ReadingProgress,
    Student,
    Subject,
    utcnow,
)
from exam_notes.core.note_renderer import renderer
from exam_notes.core.services import note_catalog
from exam_notes.core.services.content_repository import ContentRepository
from exam_notes.core.services.document_store import DocumentStore, RecordNotFoundError
from exam_notes.core.services.preference_store import PreferenceStore, ReadingTotals
from exam_notes.core.services.progress_aggregator import (
    OverallStats,
    aggregate_progress,
    overall_stats,
    per_student_averages,
)
from exam_notes.core.services.question_selector import select_questions
from exam_notes.core.services.score_calculator import ScoreResult, calculate_score
from exam_notes.core.snapshot_io import Snapshot, load_snapshot, save_snapshot

logger = logging.getLogger(__name__)


class StudyManager:
    """Facade for content, preferences, quiz sessions and progress."""

    def __init__(
        self,
        rng: random.Random | None = None,
        session_ttl: timedelta = timedelta(seconds=QUIZ_SESSION_TTL_SECONDS),
    ) -> None:
        self._lock = Lock()
        self._rng = rng or random.Random()
        self._session_ttl = session_ttl

        # Services
        self._store = DocumentStore()
        self._content = ContentRepository(self._store)
        self._preferences = PreferenceStore()
        self._sessions: dict[str, QuizSession] = {}

    # --- Categories and subjects ---

    def list_categories(self) -> list[Category]:
        with self._lock:
            return self._content.list_categories()

    def add_category(self, category: Category) -> Category:
        with self._lock:
            created = self._content.add_category(category)
        logger.info("Created category %s (%s)", created.id, created.name)
        return created

    def update_category(self, category_id: str, category: Category) -> Category:
        with self._lock:
            return self._content.update_category(category_id, category)

    def delete_category(self, category_id: str) -> None:
        with self._lock:
            self._content.delete_category(category_id)
        logger.info("Deleted category %s", category_id)

    def list_subjects(self, category_id: str | None = None) -> list[Subject]:
        with self._lock:
            return self._content.list_subjects(category_id)

    def add_subject(self, subject: Subject) -> Subject:
        with self._lock:
            created = self._content.add_subject(subject)
        logger.info("Created subject %s (%s)", created.id, created.name)
        return created

    def update_subject(self, subject_id: str, subject: Subject) -> Subject:
        with self._lock:
            return self._content.update_subject(subject_id, subject)

    def delete_subject(self, subject_id: str) -> None:
        with self._lock:
            self._content.delete_subject(subject_id)
        logger.info("Deleted subject %s", subject_id)

    def note_counts_by_subject(self) -> dict[str, int]:
        with self._lock:
            return note_catalog.note_counts_by_subject(
                self._content.list_subjects(), self._content.list_notes()
            )

    # --- Notes ---

    def list_notes(
        self,
        student_id: str | None = None,
        search: str = "",
        subject_id: str | None = None,
        difficulty: Difficulty | None = None,
        sort_by: str = note_catalog.SORT_RECENT,
    ) -> list[Note]:
        """Notes as the dashboard shows them; without a student every note is listed."""
        with self._lock:
            notes = self._content.list_notes()
            if student_id is not None:
                notes = note_catalog.visible_notes(notes, student_id)
            notes = note_catalog.filter_notes(notes, search, subject_id, difficulty)
            progress = self._preferences.progress_by_note(student_id) if student_id else {}
            return note_catalog.sort_notes(notes, sort_by, progress)

    def get_note(self, note_id: str) -> Note:
        with self._lock:
            return self._content.get_note(note_id)

    def add_note(self, note: Note, estimate_read_time: bool = False) -> Note:
        with self._lock:
            created = self._content.add_note(note, estimate_read_time)
        logger.info("Created note %s with %d page(s)", created.id, len(created.pages))
        return created

    def update_note(self, note_id: str, note: Note, estimate_read_time: bool = False) -> Note:
        with self._lock:
            return self._content.update_note(note_id, note, estimate_read_time)

    def delete_note(self, note_id: str) -> None:
        with self._lock:
            self._content.delete_note(note_id)
        logger.info("Deleted note %s", note_id)

    def render_note_page(self, note_id: str, page_number: int, student_id: str | None = None) -> str:
        with self._lock:
            note = self._content.get_note(note_id)
            page = next((p for p in note.pages if p.page_number == page_number), None)
            if page is None:
                raise RecordNotFoundError("note page", f"{note_id}#{page_number}")
            highlights = self._preferences.get_highlights(student_id, note_id) if student_id else []
        return renderer.render_fragment(page.content, highlights)

    # --- Questions ---

    def list_questions(self, note_id: str | None = None, subject_id: str | None = None) -> list[Question]:
        with self._lock:
            questions = self._content.list_questions()
        if note_id:
            questions = note_catalog.questions_for_note(questions, note_id)
        if subject_id:
            questions = [q for q in questions if q.subject_id == subject_id]
        return questions

    def add_question(self, question: Question) -> Question:
        with self._lock:
            created = self._content.add_question(question)
        logger.info("Created question %s for note %s", created.id, created.note_id)
        return created

    def update_question(self, question_id: str, question: Question) -> Question:
        with self._lock:
            return self._content.update_question(question_id, question)

    def delete_question(self, question_id: str) -> None:
        with self._lock:
            self._content.delete_question(question_id)
        logger.info("Deleted question %s", question_id)

    # --- Students ---

    def list_students(self) -> list[Student]:
        with self._lock:
            return self._content.list_students()

    def get_student(self, student_id: str) -> Student:
        with self._lock:
            return self._content.get_student(student_id)

    def student_login(self, email: str) -> Student:
        """Look a student up by e-mail and stamp the login time."""
        with self._lock:
            student = self._content.find_student_by_email(email)
            if student is None:
                raise RecordNotFoundError("student", email.strip().lower())
            student = self._content.record_login(student.id)
        logger.info("Student %s logged in", student.id)
        return student

    def add_student(self, student: Student) -> Student:
        with self._lock:
            created = self._content.add_student(student)
        logger.info("Registered student %s", created.id)
        return created

    def update_student(self, student_id: str, student: Student) -> Student:
        with self._lock:
            return self._content.update_student(student_id, student)

    def delete_student(self, student_id: str) -> None:
        """Remove a student together with their preferences and quiz history."""
        with self._lock:
            self._content.delete_student(student_id)
            self._preferences.forget_student(student_id)
            for record in self._store.list(COLLECTION_QUIZ_RECORDS):
                if record.student_id == student_id:
                    self._store.delete(COLLECTION_QUIZ_RECORDS, record.id)
            self._sessions = {
                key: session for key, session in self._sessions.items() if session.student_id != student_id
            }
        logger.info("Deleted student %s", student_id)

    # --- Bulk import and seeding ---

    def import_notes(self, raw_json: str, created_by: str = "admin") -> list[Note]:
        drafts = bulk_importer.parse_notes(bulk_importer.load_items(raw_json), created_by)
        with self._lock:
            created = self._add_all(drafts, self._content.add_note, self._content.delete_note)
        logger.info("Imported %d note(s)", len(created))
        return created

    def import_questions(self, raw_json: str, created_by: str = "admin") -> list[Question]:
        drafts = bulk_importer.parse_questions(bulk_importer.load_items(raw_json), created_by)
        with self._lock:
            created = self._add_all(drafts, self._content.add_question, self._content.delete_question)
        logger.info("Imported %d question(s)", len(created))
        return created

    def seed_sample_data(self) -> dict[str, int]:
        """Populate an empty installation with sample content."""
        with self._lock:
            if self._store.count(COLLECTION_CATEGORIES):
                raise RuntimeError("Sample data can only be loaded into an empty installation.")
            categories = [
                self._content.add_category(Category(id="", **item)) for item in seed_data.SAMPLE_CATEGORIES
            ]
            subjects = []
            for item in seed_data.SAMPLE_SUBJECTS:
                fields = {k: v for k, v in item.items() if k != "category"}
                subjects.append(
                    self._content.add_subject(
                        Subject(id="", category_id=categories[item["category"]].id, **fields)
                    )
                )
            notes = []
            for item in seed_data.SAMPLE_NOTES:
                subject = subjects[item["subject"]]
                notes.append(
                    self._content.add_note(
                        Note(
                            id="",
                            title=item["title"],
                            subject_id=subject.id,
                            category_id=subject.category_id,
                            pages=[
                                NotePage(page_number=n, content=text)
                                for n, text in enumerate(item["pages"], start=1)
                            ],
                            difficulty=Difficulty(item["difficulty"]),
                            tags=list(item["tags"]),
                        ),
                        estimate_read_time=True,
                    )
                )
            for item in seed_data.SAMPLE_QUESTIONS:
                note = notes[item["note"]]
                self._content.add_question(
                    Question(
                        id="",
                        question_text=item["question"],
                        options=list(item["options"]),
                        correct_option_index=item["correct"],
                        explanation=item["explanation"],
                        note_id=note.id,
                        subject_id=note.subject_id,
                        difficulty=Difficulty(item["difficulty"]),
                    )
                )
            counts = {
                "categories": len(categories),
                "subjects": len(subjects),
                "notes": len(notes),
                "questions": len(seed_data.SAMPLE_QUESTIONS),
            }
        logger.info("Seeded sample data: %s", counts)
        return counts

    # --- Quiz sessions ---

    def start_quiz(
        self,
        student_id: str,
        note_id: str | None = None,
        subject_id: str | None = None,
        max_count: int = DEFAULT_QUESTION_COUNT,
    ) -> QuizSession:
        """Pick questions for a student. The session may hold no questions at all."""
        with self._lock:
            self._expire_sessions()
            self._content.get_student(student_id)
            questions = select_questions(
                self._content.list_questions(),
                note_id=note_id,
                subject_id=subject_id,
                max_count=max_count,
                rng=self._rng,
                student_id=student_id,
            )
            session = QuizSession(
                id=self._store.new_id(),
                student_id=student_id,
                questions=questions,
                note_id=note_id,
                subject_id=None if note_id else subject_id,
            )
            self._sessions[session.id] = session
        logger.info(
            "Started quiz %s for student %s with %d question(s)", session.id, student_id, len(questions)
        )
        return session

    def get_quiz_session(self, session_id: str) -> QuizSession:
        with self._lock:
            self._expire_sessions()
            return self._get_session(session_id)

    def submit_quiz(
        self,
        session_id: str,
        selected_indices: list[int | None],
        time_spent: list[int] | None = None,
    ) -> tuple[QuizRecord, ScoreResult]:
        """Grade a session and store the result. The record reuses the session id."""
        with self._lock:
            self._expire_sessions()
            session = self._get_session(session_id)
            result = calculate_score(session.questions, selected_indices, time_spent)
            note_subject = session.subject_id
            if session.note_id and session.questions:
                note_subject = session.questions[0].subject_id
            record = QuizRecord(
                id=session.id,
                student_id=session.student_id,
                questions_attempted=len(session.questions),
                questions_correct=result.correct,
                score=result.score,
                completed_at=utcnow(),
                note_id=session.note_id,
                subject_id=note_subject,
                time_spent_seconds=sum(a.time_spent_seconds for a in result.attempts),
                answers=tuple(result.attempts),
            )
            self._store.insert(COLLECTION_QUIZ_RECORDS, record)
            del self._sessions[session_id]
        logger.info(
            "Quiz %s submitted by %s: %d/%d correct (%d%%)",
            session_id,
            record.student_id,
            result.correct,
            record.questions_attempted,
            result.score,
        )
        return record, result

    # --- Progress ---

    def quiz_history(self, student_id: str) -> list[QuizRecord]:
        with self._lock:
            records = [r for r in self._store.list(COLLECTION_QUIZ_RECORDS) if r.student_id == student_id]
        return sorted(records, key=lambda r: r.completed_at, reverse=True)

    def progress_for(
        self,
        student_id: str,
        note_id: str | None = None,
        subject_id: str | None = None,
    ) -> ProgressSummary:
        return aggregate_progress(self.quiz_history(student_id), note_id=note_id, subject_id=subject_id)

    def performance_overview(self) -> tuple[OverallStats, dict[str, int]]:
        with self._lock:
            records = self._store.list(COLLECTION_QUIZ_RECORDS)
            stats = overall_stats(self._content.list_students(), self._content.list_notes(), records)
        return stats, per_student_averages(records)

    # --- Preferences ---

    def get_highlights(self, student_id: str, note_id: str) -> list[Highlight]:
        with self._lock:
            return self._preferences.get_highlights(student_id, note_id)

    def add_highlight(
        self,
        student_id: str,
        note_id: str,
        text: str,
        color: str | None = None,
        note: str | None = None,
    ) -> Highlight:
        with self._lock:
            self._content.get_note(note_id)
            return self._preferences.add_highlight(student_id, note_id, text, color, note)

    def remove_highlight(self, student_id: str, note_id: str, highlight_id: str) -> None:
        with self._lock:
            if not self._preferences.remove_highlight(student_id, note_id, highlight_id):
                raise RecordNotFoundError("highlight", highlight_id)

    def all_highlights(self, student_id: str) -> list[tuple[str, Highlight]]:
        with self._lock:
            return self._preferences.all_highlights(student_id)

    def get_reading_progress(self, student_id: str, note_id: str) -> ReadingProgress | None:
        with self._lock:
            return self._preferences.get_reading_progress(student_id, note_id)

    def save_reading_progress(
        self,
        student_id: str,
        note_id: str,
        current_page: int,
        progress: float,
        reading_time_seconds: int = 0,
        words_read: int = 0,
    ) -> ReadingProgress:
        with self._lock:
            note = self._content.get_note(note_id)
            if current_page >= len(note.pages):
                raise ValueError(f"Note has only {len(note.pages)} page(s).")
            return self._preferences.save_reading_progress(
                student_id, note_id, current_page, progress, reading_time_seconds, words_read
            )

    def reading_totals(self, student_id: str) -> ReadingTotals:
        with self._lock:
            return self._preferences.reading_totals(student_id)

    def get_bookmarks(self, student_id: str) -> list[str]:
        with self._lock:
            return self._preferences.get_bookmarks(student_id)

    def toggle_bookmark(self, student_id: str, note_id: str) -> bool:
        with self._lock:
            self._content.get_note(note_id)
            return self._preferences.toggle_bookmark(student_id, note_id)

    # --- Persistence ---

    def save_to_file(self, file_path: Path) -> None:
        with self._lock:
            highlights, reading, bookmarks = self._preferences.export_state()
            snapshot = Snapshot(
                categories=self._content.list_categories(),
                subjects=self._content.list_subjects(),
                notes=self._content.list_notes(),
                questions=self._content.list_questions(),
                students=self._content.list_students(),
                quiz_records=self._store.list(COLLECTION_QUIZ_RECORDS),
                highlights=highlights,
                reading=reading,
                bookmarks=bookmarks,
            )
            save_snapshot(file_path, snapshot)
        logger.info("Saved data to %s", file_path)

    def load_from_file(self, file_path: Path) -> None:
        snapshot = load_snapshot(file_path)
        with self._lock:
            self._store.clear()
            self._sessions.clear()
            for collection, records in (
                (COLLECTION_CATEGORIES, snapshot.categories),
                (COLLECTION_SUBJECTS, snapshot.subjects),
                (COLLECTION_NOTES, snapshot.notes),
                (COLLECTION_QUESTIONS, snapshot.questions),
                (COLLECTION_STUDENTS, snapshot.students),
                (COLLECTION_QUIZ_RECORDS, snapshot.quiz_records),
            ):
                for record in records:
                    self._store.insert(collection, record)
            self._preferences.import_state(snapshot.highlights, snapshot.reading, snapshot.bookmarks)
        logger.info(
            "Loaded %d note(s) and %d question(s) from %s",
            len(snapshot.notes),
            len(snapshot.questions),
            file_path,
        )

    # --- Internal helpers ---

    def _get_session(self, session_id: str) -> QuizSession:
        session = self._sessions.get(session_id)
        if session is not None:
            return session
        if self._store.exists(COLLECTION_QUIZ_RECORDS, session_id):
            raise RuntimeError("This quiz has already been submitted.")
        raise RecordNotFoundError("quiz session", session_id)

    def _expire_sessions(self) -> None:
        cutoff = utcnow() - self._session_ttl
        stale = [key for key, session in self._sessions.items() if session.started_at < cutoff]
        for key in stale:
            del self._sessions[key]
        if stale:
            logger.info("Discarded %d unsubmitted quiz session(s)", len(stale))

    @staticmethod
    def _add_all(drafts, add, delete):
        """Add every draft or none of them."""
        created = []
        try:
            for draft in drafts:
                created.append(add(draft))
        except ValueError:
            for record in created:
                delete(record.id)
            raise
        return created
