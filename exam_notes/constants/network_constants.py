"""Network configuration constants for the study application."""

import os

DEFAULT_HOST: str = os.getenv("EXAM_NOTES_HOST", "127.0.0.1")
DEFAULT_PORT: int = int(os.getenv("EXAM_NOTES_PORT", "8000"))
ALLOWED_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.getenv("EXAM_NOTES_ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]
