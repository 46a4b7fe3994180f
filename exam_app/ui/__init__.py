"""Qt UI components for the student portal."""

from .dialog_helpers import (
    confirm_leave_test,
    show_error,
    show_info,
    show_notice,
    show_warning,
)
from .qt_scheduler import QtScheduler
from .student_main_window import StudentMainWindow

__all__ = [
    "QtScheduler",
    "StudentMainWindow",
    "confirm_leave_test",
    "show_error",
    "show_info",
    "show_notice",
    "show_warning",
]
