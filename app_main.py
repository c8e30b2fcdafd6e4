"""Application entry point for the ExamNotes service."""

from __future__ import annotations

from exam_notes.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from exam_notes.constants.storage_constants import DATA_FILE_PATH
from exam_notes.core.study_manager import StudyManager
from exam_notes.server.api_server import run_api_server
from exam_notes.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging, restore saved data and serve the API."""
    logger = configure_logging()
    logger.info("Starting ExamNotes...")

    study_manager = StudyManager()
    if DATA_FILE_PATH.exists():
        study_manager.load_from_file(DATA_FILE_PATH)
    else:
        logger.info("No data file at %s; starting empty", DATA_FILE_PATH)

    try:
        run_api_server(study_manager=study_manager, host=DEFAULT_HOST, port=DEFAULT_PORT)
    finally:
        study_manager.save_to_file(DATA_FILE_PATH)


if __name__ == "__main__":
    main()
