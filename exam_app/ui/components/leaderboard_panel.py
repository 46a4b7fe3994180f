"""Component showing the top performers and the student's own results."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QGroupBox,
    QHeaderView,
    QLabel,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.ui_constants import LEADERBOARD_EMPTY_STATE, RESULTS_EMPTY_STATE
from exam_app.core.events import Subscription
from exam_app.core.models import LeaderboardEntry
from exam_app.core.portal_manager import PortalManager
from exam_app.core.scheduler import Scheduler


def format_elapsed(seconds: float) -> str:
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


class LeaderboardPanel(QWidget):
    """Top-N ranking, refreshed whenever the attempt history changes."""

    def __init__(
        self,
        portal_manager: PortalManager,
        scheduler: Scheduler,
        scoreboard_size: int,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.portal_manager = portal_manager
        self.scheduler = scheduler
        self._scoreboard_size = scoreboard_size
        self._subscription: Subscription | None = None

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.scoreboard_group = QGroupBox(f"Top {self._scoreboard_size}", self)
        self.scoreboard_layout = QVBoxLayout()
        self.scoreboard_group.setLayout(self.scoreboard_layout)
        layout.addWidget(self.scoreboard_group)

        self.scoreboard_labels: list[QLabel] = []
        for idx in range(self._scoreboard_size):
            label = QLabel(f"{idx + 1}. —", self)
            label.setAlignment(Qt.AlignLeft)
            label.setWordWrap(True)
            self.scoreboard_layout.addWidget(label)
            self.scoreboard_labels.append(label)

        self.empty_label = QLabel(LEADERBOARD_EMPTY_STATE, self)
        self.scoreboard_layout.addWidget(self.empty_label)
        self.scoreboard_layout.addStretch()
        layout.addStretch()

    def start(self) -> None:
        """Subscribe to ranking changes; updates may arrive from worker threads."""
        if self._subscription is None:
            self._subscription = self.portal_manager.leaderboard.subscribe(
                lambda entries: self.scheduler.call_soon(lambda: self.show_entries(entries))
            )
        self.show_entries(self.portal_manager.start_leaderboard())

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def show_entries(self, entries: list[LeaderboardEntry]) -> None:
        for idx, label in enumerate(self.scoreboard_labels):
            if idx < len(entries):
                entry = entries[idx]
                label.setText(
                    f"{entry.rank}. {entry.display_name} (Class {entry.class_name}) — "
                    f"{entry.score}/{entry.total_questions} in {format_elapsed(entry.elapsed_seconds)} "
                    f"on {entry.test_title}"
                )
            else:
                label.setText(f"{idx + 1}. —")
        self.empty_label.setVisible(not entries)


class ResultsPanel(QWidget):
    """Table of the student's own objective results, newest first."""

    _HEADERS = ("Test", "Subject", "Score", "Time", "Submitted")

    def __init__(self, portal_manager: PortalManager, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.portal_manager = portal_manager

        layout = QVBoxLayout()
        self.setLayout(layout)
        self.table = QTableWidget(0, len(self._HEADERS), self)
        self.table.setHorizontalHeaderLabels(list(self._HEADERS))
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        layout.addWidget(self.table, stretch=1)
        self.empty_label = QLabel(RESULTS_EMPTY_STATE, self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.empty_label)

    def refresh_results(self) -> None:
        rows = self.portal_manager.get_results()
        self.table.setRowCount(len(rows))
        for row_index, row in enumerate(rows):
            submitted = row.submitted_at.strftime("%d %b %Y, %H:%M") if row.submitted_at else "—"
            elapsed = format_elapsed(row.elapsed_seconds) if row.elapsed_seconds is not None else "—"
            values = (row.test_title, row.subject, f"{row.score} / {row.total_questions}", elapsed, submitted)
            for column, value in enumerate(values):
                self.table.setItem(row_index, column, QTableWidgetItem(value))
        self.empty_label.setVisible(not rows)
