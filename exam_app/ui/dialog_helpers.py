"""Helper functions for common dialog patterns in the student UI."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget

from exam_app.core.models import Notice, NoticeLevel


def confirm_leave_test(parent: QWidget) -> bool:
    """Ask before abandoning a running test.

    Returns:
        True if the user confirmed, False otherwise
    """
    reply = QMessageBox.question(
        parent,
        "Leave Test",
        "Leaving now discards your answers and records no result. Continue?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.information(parent, title, message)


def show_warning(parent: QWidget, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)


def notice_text(notice: Notice) -> str:
    """One-line rendering of a notice for status bars."""
    if notice.message:
        return f"{notice.title} {notice.message}"
    return notice.title


def show_notice(parent: QWidget, notice: Notice) -> None:
    """Errors get a dialog; success and info notices are left to the status bar."""
    if notice.level is NoticeLevel.ERROR:
        show_error(parent, notice.title, notice.message or notice.title)
