"""Component for answering a running objective test."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QButtonGroup,
    QDialog,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.session_constants import OPTION_LABELS, TIME_WARNING_WINDOW_SECONDS
from exam_app.constants.ui_constants import (
    RESULT_DASHBOARD_BUTTON,
    RESULT_DIALOG_TITLE,
    RESULT_RETRY_BUTTON,
    SESSION_LEAVE_BUTTON,
    SESSION_NEXT_BUTTON,
    SESSION_QUESTION_TEMPLATE,
    SESSION_SUBMIT_BUTTON,
    SESSION_TIME_TEMPLATE,
)
from exam_app.core.events import Subscription
from exam_app.core.markdown_math_renderer import renderer
from exam_app.core.models import FinishReason, SessionPhase, SessionState, SubmissionStatus
from exam_app.core.portal_manager import PortalManager
from exam_app.ui.dialog_helpers import confirm_leave_test

_SUBMISSION_TEXT = {
    SubmissionStatus.NOT_SUBMITTED: "",
    SubmissionStatus.PENDING: "Saving your result…",
    SubmissionStatus.SAVED: "Your result has been saved.",
    SubmissionStatus.FAILED: "Your result could not be saved. Your score is shown below.",
}


class ResultDialog(QDialog):
    """Score summary shown once the session finishes."""

    def __init__(self, portal_manager: PortalManager, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.portal_manager = portal_manager
        self.setWindowTitle(RESULT_DIALOG_TITLE)
        self.setModal(False)
        self.setMinimumWidth(360)

        layout = QVBoxLayout()
        self.setLayout(layout)

        self.reason_label = QLabel("", self)
        self.reason_label.setWordWrap(True)
        layout.addWidget(self.reason_label)

        self.score_label = QLabel("", self)
        self.score_label.setAlignment(Qt.AlignCenter)
        self.score_label.setStyleSheet("font-size: 28pt; font-weight: bold;")
        layout.addWidget(self.score_label)

        self.status_label = QLabel("", self)
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)

        button_row = QHBoxLayout()
        self.retry_button = QPushButton(RESULT_RETRY_BUTTON, self)
        self.retry_button.clicked.connect(self.portal_manager.retry_submission)
        button_row.addWidget(self.retry_button)
        button_row.addStretch()
        self.close_button = QPushButton(RESULT_DASHBOARD_BUTTON, self)
        self.close_button.clicked.connect(self.accept)
        button_row.addWidget(self.close_button)
        layout.addLayout(button_row)

    def update_from_state(self, state: SessionState) -> None:
        if state.finish_reason is FinishReason.EXPIRED:
            self.reason_label.setText("Time is up. Your answers so far were submitted.")
        else:
            self.reason_label.setText("You have successfully completed the objective test.")
        self.score_label.setText(f"{state.score} / {state.total_questions}")
        self.status_label.setText(_SUBMISSION_TEXT[state.submission_status])
        self.retry_button.setVisible(state.submission_status is SubmissionStatus.FAILED)


class SessionPanel(QWidget):
    """UI component that renders the active session and forwards input."""

    def __init__(
        self,
        portal_manager: PortalManager,
        on_session_closed: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.portal_manager = portal_manager
        self.on_session_closed = on_session_closed
        self._shown_question_id: str | None = None
        self._subscription: Subscription | None = None
        self.result_dialog = ResultDialog(portal_manager, self)
        self.result_dialog.finished.connect(lambda _code: self._close_session())

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        header_row = QHBoxLayout()
        self.question_counter_label = QLabel("", self)
        self.question_counter_label.setStyleSheet("font-size: 14pt; font-weight: bold;")
        header_row.addWidget(self.question_counter_label)
        header_row.addStretch()
        self.time_label = QLabel("", self)
        header_row.addWidget(self.time_label)
        layout.addLayout(header_row)

        self.progress_bar = QProgressBar(self)
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setTextVisible(False)
        layout.addWidget(self.progress_bar)

        self.question_label = QLabel("", self)
        self.question_label.setTextFormat(Qt.RichText)
        self.question_label.setWordWrap(True)
        layout.addWidget(self.question_label, stretch=1)

        self.option_group = QButtonGroup(self)
        self.option_group.setExclusive(True)
        self.option_buttons: list[QPushButton] = []
        for label in OPTION_LABELS:
            button = QPushButton(label, self)
            button.setCheckable(True)
            button.clicked.connect(lambda _checked, chosen=label: self._handle_option_click(chosen))
            self.option_group.addButton(button)
            self.option_buttons.append(button)
            layout.addWidget(button)

        footer_row = QHBoxLayout()
        self.leave_button = QPushButton(SESSION_LEAVE_BUTTON, self)
        self.leave_button.clicked.connect(self._handle_leave_click)
        footer_row.addWidget(self.leave_button)
        footer_row.addStretch()
        self.advance_button = QPushButton(SESSION_NEXT_BUTTON, self)
        self.advance_button.clicked.connect(self._handle_advance_click)
        footer_row.addWidget(self.advance_button)
        layout.addLayout(footer_row)

    def attach(self) -> None:
        """Start listening to the session engine."""
        if self._subscription is None:
            self._subscription = self.portal_manager.session.subscribe(self._render_state)
        self._shown_question_id = None
        self._render_state(self.portal_manager.get_session_state())

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def is_running(self) -> bool:
        state = self.portal_manager.get_session_state()
        return state is not None and state.phase is SessionPhase.RUNNING

    def _render_state(self, state: SessionState | None) -> None:
        if state is None:
            return
        if state.finished:
            self._set_inputs_enabled(False)
            self.time_label.setText(SESSION_TIME_TEMPLATE.format(time=state.format_remaining()))
            self.progress_bar.setValue(int(state.progress_percent()))
            if state.result_dialog_visible:
                self.result_dialog.update_from_state(state)
                if not self.result_dialog.isVisible():
                    self.result_dialog.show()
            return

        question = state.current_question
        if question.id != self._shown_question_id:
            self._shown_question_id = question.id
            self._display_question(state)

        self.time_label.setText(SESSION_TIME_TEMPLATE.format(time=state.format_remaining()))
        self._set_time_emphasis(state.remaining_seconds <= TIME_WARNING_WINDOW_SECONDS)
        self.progress_bar.setValue(int(state.progress_percent()))
        selected = state.selected_option()
        for label, button in zip(OPTION_LABELS, self.option_buttons):
            button.setChecked(label == selected)
        self.advance_button.setText(SESSION_SUBMIT_BUTTON if state.is_last_question else SESSION_NEXT_BUTTON)
        self.advance_button.setEnabled(state.can_advance())

    def _display_question(self, state: SessionState) -> None:
        question = state.current_question
        self.question_counter_label.setText(
            SESSION_QUESTION_TEMPLATE.format(number=state.current_index + 1, total=state.total_questions)
        )
        self.question_label.setText(renderer.render_fragment(question.question_text))
        for label, button, option in zip(OPTION_LABELS, self.option_buttons, question.options):
            button.setText(f"{label}. {option}")
        self._set_inputs_enabled(True)

    def _set_inputs_enabled(self, enabled: bool) -> None:
        for button in self.option_buttons:
            button.setEnabled(enabled)
        self.advance_button.setEnabled(enabled)
        self.leave_button.setEnabled(enabled)

    def _set_time_emphasis(self, enabled: bool) -> None:
        if enabled:
            self.time_label.setStyleSheet("padding: 2px 6px; border-radius: 4px; color: #fff; background-color: #ef4444;")
        else:
            self.time_label.setStyleSheet("padding: 2px 6px; color: #b91c1c; font-weight: bold;")

    def _handle_option_click(self, label: str) -> None:
        state = self.portal_manager.get_session_state()
        if state is None or state.finished:
            return
        self.portal_manager.select_answer(state.current_question.id, label)

    def _handle_advance_click(self) -> None:
        state = self.portal_manager.get_session_state()
        if state is None or not state.can_advance():
            return
        self.portal_manager.advance()

    def _handle_leave_click(self) -> None:
        if self.is_running() and not confirm_leave_test(self):
            return
        self._close_session()

    def _close_session(self) -> None:
        self.result_dialog.hide()
        self.detach()
        self.portal_manager.leave_test()
        self._shown_question_id = None
        self.on_session_closed()
