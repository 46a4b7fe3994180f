"""Qt main window switching between test selection, session and rankings."""

from __future__ import annotations

from enum import Enum, auto

from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from exam_app.constants.ui_constants import (
    MODE_BUTTON_LEADERBOARD,
    MODE_BUTTON_RESULTS,
    MODE_BUTTON_TESTS,
    WINDOW_TITLE,
)
from exam_app.core.events import Subscription
from exam_app.core.models import Notice
from exam_app.core.portal_manager import PortalManager
from exam_app.core.scheduler import Scheduler
from exam_app.ui.components.leaderboard_panel import LeaderboardPanel, ResultsPanel
from exam_app.ui.components.session_panel import SessionPanel
from exam_app.ui.components.test_selection_panel import TestSelectionPanel
from exam_app.ui.dialog_helpers import confirm_leave_test, notice_text, show_info, show_notice


class StudentMode(Enum):
    """High-level UI mode for the student portal."""

    TEST_SELECTION = auto()
    TEST_SESSION = auto()
    LEADERBOARD = auto()
    RESULTS = auto()


class StudentMainWindow(QMainWindow):
    """Main Qt window orchestrating the portal modes."""

    def __init__(
        self,
        portal_manager: PortalManager,
        scheduler: Scheduler,
        scoreboard_size: int,
    ) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)

        self.portal_manager = portal_manager
        self.scheduler = scheduler
        self._scoreboard_size = scoreboard_size
        self._mode = StudentMode.TEST_SELECTION
        self._notice_subscription: Subscription | None = None

        self._build_ui()
        self._notice_subscription = self.portal_manager.subscribe_notices(
            lambda notice: self.scheduler.call_soon(lambda: self._handle_notice(notice))
        )
        self.selection_panel.refresh_tests()
        self.leaderboard_panel.start()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_mode_buttons(root_layout)

        self.mode_stack = QStackedWidget(self)
        self.selection_panel = TestSelectionPanel(
            self.portal_manager,
            on_start_test=self._handle_start_test,
            parent=self,
        )
        self.session_panel = SessionPanel(
            self.portal_manager,
            on_session_closed=self._handle_session_closed,
            parent=self,
        )
        self.leaderboard_panel = LeaderboardPanel(
            self.portal_manager,
            self.scheduler,
            self._scoreboard_size,
            parent=self,
        )
        self.results_panel = ResultsPanel(self.portal_manager, self)

        self.mode_stack.addWidget(self.selection_panel)
        self.mode_stack.addWidget(self.session_panel)
        self.mode_stack.addWidget(self.leaderboard_panel)
        self.mode_stack.addWidget(self.results_panel)
        root_layout.addWidget(self.mode_stack)

        self._set_mode(StudentMode.TEST_SELECTION)

    def _build_mode_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.tests_button = QPushButton(MODE_BUTTON_TESTS, self)
        self.tests_button.setCheckable(True)
        self.tests_button.clicked.connect(lambda: self._set_mode(StudentMode.TEST_SELECTION))
        button_row.addWidget(self.tests_button)

        self.leaderboard_button = QPushButton(MODE_BUTTON_LEADERBOARD, self)
        self.leaderboard_button.setCheckable(True)
        self.leaderboard_button.clicked.connect(lambda: self._set_mode(StudentMode.LEADERBOARD))
        button_row.addWidget(self.leaderboard_button)

        self.results_button = QPushButton(MODE_BUTTON_RESULTS, self)
        self.results_button.setCheckable(True)
        self.results_button.clicked.connect(self._handle_results_click)
        button_row.addWidget(self.results_button)

        button_row.addStretch()

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(lambda: show_info(self, f"{APP_NAME} Help", HELP_TEXT))
        button_row.addWidget(self.help_button)

        layout.addLayout(button_row)

    def _set_mode(self, mode: StudentMode) -> None:
        self._mode = mode
        in_session = mode == StudentMode.TEST_SESSION
        for button in (self.tests_button, self.leaderboard_button, self.results_button):
            button.setEnabled(not in_session)
        self.tests_button.setChecked(mode == StudentMode.TEST_SELECTION)
        self.leaderboard_button.setChecked(mode == StudentMode.LEADERBOARD)
        self.results_button.setChecked(mode == StudentMode.RESULTS)

        index_map = {
            StudentMode.TEST_SELECTION: 0,
            StudentMode.TEST_SESSION: 1,
            StudentMode.LEADERBOARD: 2,
            StudentMode.RESULTS: 3,
        }
        self.mode_stack.setCurrentIndex(index_map[mode])

    def _handle_start_test(self, test_id: str) -> None:
        state = self.portal_manager.begin_test(test_id)
        if state is None:
            return
        self._set_mode(StudentMode.TEST_SESSION)
        self.session_panel.attach()

    def _handle_session_closed(self) -> None:
        self._set_mode(StudentMode.TEST_SELECTION)
        self.selection_panel.refresh_tests()

    def _handle_results_click(self) -> None:
        self.results_panel.refresh_results()
        self._set_mode(StudentMode.RESULTS)

    def _handle_notice(self, notice: Notice) -> None:
        self.statusBar().showMessage(notice_text(notice), 5000)
        show_notice(self, notice)

    def _handle_about(self) -> None:
        details = f"{APP_NAME} v{APP_VERSION}\nLicense: {APP_LICENSE}\n\n{APP_ABOUT_TEXT}"
        show_info(self, f"About {APP_NAME}", details)

    def closeEvent(self, event: QCloseEvent) -> None:
        if self.session_panel.is_running() and not confirm_leave_test(self):
            event.ignore()
            return
        self.session_panel.detach()
        self.leaderboard_panel.stop()
        if self._notice_subscription is not None:
            self._notice_subscription.unsubscribe()
        self.portal_manager.shutdown()
        super().closeEvent(event)
