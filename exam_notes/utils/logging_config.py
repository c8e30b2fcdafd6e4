"""Logging configuration helpers for the study application."""

from __future__ import annotations

import logging
from logging import Logger
import os


def configure_logging(level: str | None = None) -> Logger:
    """Configure basic logging for the application and return the package logger."""
    level_name = (level or os.getenv("EXAM_NOTES_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("exam_notes")
