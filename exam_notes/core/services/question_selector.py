"""Picks the question set for a quiz from the full question pool."""

from __future__ import annotations

import random

from exam_notes.constants.quiz_constants import DEFAULT_QUESTION_COUNT
from exam_notes.core.models import Question


def select_questions(
    pool: list[Question],
    note_id: str | None = None,
    subject_id: str | None = None,
    max_count: int = DEFAULT_QUESTION_COUNT,
    rng: random.Random | None = None,
    student_id: str | None = None,
) -> list[Question]:
    """Filter the pool by scope, shuffle it and keep at most ``max_count`` questions.

    A note scope wins over a subject scope. With neither, the whole pool is used.
    An empty result is a valid outcome ("no questions available") and is left for
    the caller to present.
    """
    if max_count <= 0:
        return []

    if note_id:
        scoped = [q for q in pool if q.note_id == note_id]
    elif subject_id:
        scoped = [q for q in pool if q.subject_id == subject_id]
    else:
        scoped = list(pool)

    candidates: list[Question] = []
    seen_ids: set[str] = set()
    for question in scoped:
        if question.id in seen_ids or not question.is_visible_to(student_id):
            continue
        seen_ids.add(question.id)
        candidates.append(question)

    (rng or random.Random()).shuffle(candidates)
    return candidates[:max_count]
