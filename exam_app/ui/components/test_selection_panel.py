"""Component listing the objective tests published for the student's class."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.ui_constants import (
    SELECTION_DESCRIPTION,
    SELECTION_EMPTY_STATE,
    SELECTION_REFRESH_BUTTON,
    SELECTION_START_BUTTON,
)
from exam_app.core.models import Test
from exam_app.core.portal_manager import PortalManager
from exam_app.ui.dialog_helpers import show_warning


class TestSelectionPanel(QWidget):
    """UI component for picking a test to start."""

    def __init__(
        self,
        portal_manager: PortalManager,
        on_start_test: Callable[[str], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.portal_manager = portal_manager
        self.on_start_test = on_start_test
        self._tests: list[Test] = []

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.description_label = QLabel(SELECTION_DESCRIPTION, self)
        self.description_label.setWordWrap(True)
        layout.addWidget(self.description_label)

        self.test_list = QListWidget(self)
        self.test_list.setAlternatingRowColors(True)
        self.test_list.currentRowChanged.connect(self._handle_selection_changed)
        self.test_list.itemDoubleClicked.connect(lambda _item: self._handle_start_click())
        layout.addWidget(self.test_list, stretch=1)

        self.detail_label = QLabel("", self)
        self.detail_label.setWordWrap(True)
        layout.addWidget(self.detail_label)

        self.empty_label = QLabel(SELECTION_EMPTY_STATE, self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.empty_label)

        button_row = QHBoxLayout()
        self.refresh_button = QPushButton(SELECTION_REFRESH_BUTTON, self)
        self.refresh_button.clicked.connect(self.refresh_tests)
        button_row.addWidget(self.refresh_button)
        button_row.addStretch()
        self.start_button = QPushButton(SELECTION_START_BUTTON, self)
        self.start_button.clicked.connect(self._handle_start_click)
        button_row.addWidget(self.start_button)
        layout.addLayout(button_row)

    def refresh_tests(self) -> None:
        self._tests = self.portal_manager.list_tests()
        self.test_list.clear()
        for test in self._tests:
            QListWidgetItem(f"{test.title} — {test.subject} ({test.duration_minutes} min)", self.test_list)
        has_tests = bool(self._tests)
        self.empty_label.setVisible(not has_tests)
        self.start_button.setEnabled(has_tests)
        if has_tests:
            self.test_list.setCurrentRow(0)
        else:
            self.detail_label.setText("")

    def _handle_selection_changed(self, row: int) -> None:
        if not 0 <= row < len(self._tests):
            self.detail_label.setText("")
            return
        test = self._tests[row]
        minutes = "minute" if test.duration_minutes == 1 else "minutes"
        details = f"You will have {test.duration_minutes} {minutes} for the whole test."
        if test.description:
            details = f"{test.description}\n\n{details}"
        self.detail_label.setText(details)

    def _handle_start_click(self) -> None:
        row = self.test_list.currentRow()
        if not 0 <= row < len(self._tests):
            show_warning(self, "No test selected", "Pick a test from the list first.")
            return
        self.on_start_test(self._tests[row].id)
