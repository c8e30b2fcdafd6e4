"""Grades submitted answers and turns them into a percentage score."""

from __future__ import annotations

from dataclasses import dataclass, field

from exam_notes.constants.quiz_constants import (
    EXCELLENT_SCORE_THRESHOLD,
    GOOD_SCORE_THRESHOLD,
    SCORE_MESSAGES,
)
from exam_notes.core.models import Question, QuizAttemptResult

UNANSWERED = None


@dataclass(slots=True)
class ScoreResult:
    """Snapshot of a graded question set."""

    score: int = 0
    correct: int = 0
    incorrect: int = 0
    unanswered: int = 0
    attempts: list[QuizAttemptResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.correct + self.incorrect + self.unanswered


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage rounded half up; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def calculate_score(
    questions: list[Question],
    selected_indices: list[int | None],
    time_spent: list[int] | None = None,
) -> ScoreResult:
    """Compare each selection with the question's correct option.

    ``None`` marks an unanswered question. Indices outside the question's option
    range are treated as unanswered, as are selections missing from the end of
    the list. Extra selections are ignored.
    """
    result = ScoreResult()
    for position, question in enumerate(questions):
        selected = selected_indices[position] if position < len(selected_indices) else UNANSWERED
        if selected is not UNANSWERED and not 0 <= selected < len(question.options):
            selected = UNANSWERED

        seconds = 0
        if time_spent is not None and position < len(time_spent):
            seconds = max(0, int(time_spent[position]))

        is_correct = selected is not UNANSWERED and selected == question.correct_option_index
        if selected is UNANSWERED:
            result.unanswered += 1
        elif is_correct:
            result.correct += 1
        else:
            result.incorrect += 1

        result.attempts.append(
            QuizAttemptResult(
                question_id=question.id,
                selected_option_index=selected,
                is_correct=is_correct,
                time_spent_seconds=seconds,
            )
        )

    result.score = percentage(result.correct, len(questions))
    return result


def score_band(score: int) -> str:
    if score >= EXCELLENT_SCORE_THRESHOLD:
        return "excellent"
    if score >= GOOD_SCORE_THRESHOLD:
        return "good"
    return "needs-practice"


def score_message(score: int) -> str:
    """Encouragement line shown next to a finished quiz."""
    for threshold, message in SCORE_MESSAGES:
        if score >= threshold:
            return message
    return SCORE_MESSAGES[-1][1]
