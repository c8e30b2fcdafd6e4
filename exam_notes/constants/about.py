"""Static metadata describing ExamNotes."""

APP_NAME = "ExamNotes"
APP_VERSION = "0.1"
APP_ABOUT_TEXT = (
    "ExamNotes serves study notes and practice quizzes for exam students. "
    "Admins manage categories, subjects, notes and questions; students read notes, "
    "keep highlights and bookmarks, and track their quiz progress."
)
