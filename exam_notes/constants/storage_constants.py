"""Storage and reading constants."""

import os
from pathlib import Path

DATA_FILE_PATH: Path = Path(os.getenv("EXAM_NOTES_DATA_FILE", "data/exam_notes.json"))
SNAPSHOT_VERSION: int = 1
WORDS_PER_MINUTE: int = 200
DEFAULT_HIGHLIGHT_COLOR: str = "yellow"

COLLECTION_CATEGORIES: str = "categories"
COLLECTION_SUBJECTS: str = "subjects"
COLLECTION_NOTES: str = "notes"
COLLECTION_QUESTIONS: str = "questions"
COLLECTION_STUDENTS: str = "students"
COLLECTION_QUIZ_RECORDS: str = "quiz_records"
