"""Application entry point for the ExamQt student portal."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from logging import Logger
import sys

from PySide6.QtWidgets import QApplication

from exam_app.config import PortalSettings
from exam_app.core.errors import TestImportError
from exam_app.core.models import Profile
from exam_app.core.portal_manager import PortalManager
from exam_app.core.services.record_store import InMemoryRecordStore
from exam_app.core.test_importer import load_test_directory
from exam_app.server.api_server import start_api_server
from exam_app.ui.qt_scheduler import QtScheduler
from exam_app.ui.student_main_window import StudentMainWindow
from exam_app.utils.logging_config import configure_logging


def _seed_store(store: InMemoryRecordStore, settings: PortalSettings, logger: Logger) -> None:
    """Register the signed-in student and publish the bundled tests."""
    store.upsert_profile(
        Profile(
            user_id=settings.user_id,
            display_name=settings.display_name,
            class_name=settings.class_name,
        )
    )
    if not settings.tests_dir.is_dir():
        logger.warning("Test directory %s not found; no tests published", settings.tests_dir)
        return
    try:
        imported_tests = load_test_directory(settings.tests_dir)
    except (OSError, TestImportError) as exc:
        logger.error("Could not import tests from %s: %s", settings.tests_dir, exc)
        return
    for imported in imported_tests:
        try:
            store.add_test(imported.test, imported.questions)
        except ValueError as exc:
            logger.error("Rejected test %s: %s", imported.source_path, exc)


def main() -> None:
    """Initialize logging, seed the store, start the API server, and launch the Qt UI."""
    settings = PortalSettings()
    logger = configure_logging(settings.log_level)
    logger.info("Starting ExamQt student portal…")

    store = InMemoryRecordStore()
    _seed_store(store, settings, logger)

    app = QApplication(sys.argv)
    scheduler = QtScheduler(app)
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="AttemptWriter") as executor:
        portal_manager = PortalManager(
            store,
            user_id=settings.user_id,
            scheduler=scheduler,
            executor=executor,
            leaderboard_size=settings.leaderboard_size,
        )
        if settings.api_enabled:
            start_api_server(portal_manager, host=settings.host, port=settings.port)

        window = StudentMainWindow(portal_manager, scheduler, settings.leaderboard_size)
        window.show()
        exit_code = app.exec()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
