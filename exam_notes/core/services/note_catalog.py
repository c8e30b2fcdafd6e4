"""Filtering and ordering of notes for the student dashboard."""

from __future__ import annotations

from exam_notes.core.models import Difficulty, Note, Question, Subject

SORT_RECENT = "recent"
SORT_TITLE = "title"
SORT_DIFFICULTY = "difficulty"
SORT_PROGRESS = "progress"
SORT_OPTIONS = (SORT_RECENT, SORT_TITLE, SORT_DIFFICULTY, SORT_PROGRESS)


def visible_notes(notes: list[Note], student_id: str | None) -> list[Note]:
    """Notes without an assignment list are visible to everyone."""
    return [note for note in notes if note.is_visible_to(student_id)]


def filter_notes(
    notes: list[Note],
    search: str = "",
    subject_id: str | None = None,
    difficulty: Difficulty | None = None,
) -> list[Note]:
    term = search.strip().lower()

    def matches(note: Note) -> bool:
        if subject_id and note.subject_id != subject_id:
            return False
        if difficulty is not None and note.difficulty != difficulty:
            return False
        if not term:
            return True
        haystack = [note.title, note.title_en, note.title_si, *note.tags]
        return any(term in value.lower() for value in haystack)

    return [note for note in notes if matches(note)]


def sort_notes(
    notes: list[Note],
    sort_by: str = SORT_RECENT,
    progress_by_note: dict[str, int] | None = None,
) -> list[Note]:
    if sort_by == SORT_RECENT:
        return sorted(notes, key=lambda n: n.updated_at, reverse=True)
    if sort_by == SORT_TITLE:
        return sorted(notes, key=lambda n: n.title.casefold())
    if sort_by == SORT_DIFFICULTY:
        return sorted(notes, key=lambda n: n.difficulty.rank)
    if sort_by == SORT_PROGRESS:
        progress = progress_by_note or {}
        return sorted(notes, key=lambda n: progress.get(n.id, 0), reverse=True)
    raise ValueError(f"Unknown sort order '{sort_by}'. Expected one of {', '.join(SORT_OPTIONS)}.")


def questions_for_note(questions: list[Question], note_id: str) -> list[Question]:
    return [q for q in questions if q.note_id == note_id]


def note_counts_by_subject(subjects: list[Subject], notes: list[Note]) -> dict[str, int]:
    counts = {subject.id: 0 for subject in subjects}
    for note in notes:
        if note.subject_id in counts:
            counts[note.subject_id] += 1
    return counts
