"""Quiz-related constants shared across core and server layers."""

DEFAULT_QUESTION_COUNT: int = 10
DEFAULT_QUIZ_TIME_LIMIT_SECONDS: int = 300
DEFAULT_QUESTION_POINTS: int = 1
MIN_OPTION_COUNT: int = 2

# Unsubmitted quizzes are discarded after this long.
QUIZ_SESSION_TTL_SECONDS: int = 2 * 60 * 60

EXCELLENT_SCORE_THRESHOLD: int = 80
GOOD_SCORE_THRESHOLD: int = 60

SCORE_MESSAGES: list[tuple[int, str]] = [
    (90, "Excellent! Outstanding performance!"),
    (80, "Great job! You're doing well!"),
    (70, "Good work! Keep it up!"),
    (60, "Not bad! Room for improvement."),
    (0, "Keep studying! You'll get better!"),
]
