"""Service running one timed objective-test attempt.

A session moves ``NotStarted -> Running -> Finished``. ``Running`` has two
exits, advancing past the last question and the countdown reaching zero.
Both go through ``_finalize``, whose check-and-set of ``finished`` is the
only way into ``Finished``; whichever path runs second is a no-op, so at
most one attempt record is built per session.
"""

from __future__ import annotations

from concurrent.futures import Executor, Future
import logging
from typing import Callable, Sequence
from uuid import uuid4

from exam_app.constants.session_constants import OPTION_LABELS, TICK_INTERVAL_SECONDS
from exam_app.core.errors import NotFound, PersistenceError, PortalError, ValidationError
from exam_app.core.events import ListenerRegistry, Subscription
from exam_app.core.models import (
    AttemptRecord,
    FinishReason,
    Notice,
    NoticeLevel,
    Question,
    SessionState,
    SubmissionStatus,
    Test,
)
from exam_app.core.scheduler import PeriodicTask, Scheduler
from exam_app.core.services.record_store import AttemptStore, QuestionStore

logger = logging.getLogger(__name__)


class SessionEngine:
    """Owns the single active session of one user in one client."""

    def __init__(
        self,
        user_id: str,
        question_store: QuestionStore,
        attempt_store: AttemptStore,
        scheduler: Scheduler,
        executor: Executor | None = None,
    ) -> None:
        self._user_id = user_id
        self._question_store = question_store
        self._attempt_store = attempt_store
        self._scheduler = scheduler
        self._executor = executor
        self._state: SessionState | None = None
        self._timer: PeriodicTask | None = None
        self._listeners: ListenerRegistry[SessionState | None] = ListenerRegistry()
        self._notices: ListenerRegistry[Notice] = ListenerRegistry()

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def state(self) -> SessionState | None:
        return self._state

    def subscribe(self, listener: Callable[[SessionState | None], None]) -> Subscription:
        """Register a listener called with the session state after every change."""
        return self._listeners.subscribe(listener)

    def subscribe_notices(self, listener: Callable[[Notice], None]) -> Subscription:
        return self._notices.subscribe(listener)

    def has_running_timer(self) -> bool:
        return self._timer is not None and self._timer.active

    # --- Lifecycle ---

    def load_test(self, test_id: str) -> list[Question]:
        """Fetch the ordered questions of a test.

        Raises:
            NotFound: the test has no questions.
            PersistenceError: the question store failed.
        """
        try:
            questions = self._question_store.fetch_questions(test_id)
        except PortalError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Could not load questions for test {test_id!r}.") from exc
        if not questions:
            raise NotFound(f"Test {test_id!r} has no questions.")
        return list(questions)

    def start(self, test: Test, questions: Sequence[Question]) -> SessionState:
        """Begin a fresh attempt, discarding any session already in memory."""
        if not questions:
            raise NotFound(f"Test {test.id!r} has no questions.")
        self.dispose()

        state = SessionState(
            session_id=uuid4().hex,
            test=test,
            questions=list(questions),
            session_started_at=self._scheduler.now(),
            remaining_seconds=test.duration_minutes * 60,
            started=True,
        )
        self._state = state
        self._timer = self._scheduler.call_every(TICK_INTERVAL_SECONDS, lambda: self._tick(state))
        logger.info(
            "User %s started test %s (%d questions, %d min)",
            self._user_id,
            test.id,
            state.total_questions,
            test.duration_minutes,
        )
        self._notices.notify(Notice(NoticeLevel.SUCCESS, "Objective test started! Good luck!"))
        self._listeners.notify(state)
        return state

    def dispose(self) -> None:
        """Cancel the countdown and drop the in-memory session."""
        self._cancel_timer()
        state = self._state
        if state is None:
            return
        if not state.finished:
            logger.info("User %s abandoned test %s; nothing is recorded", self._user_id, state.test.id)
        elif state.submission_status is SubmissionStatus.FAILED:
            logger.warning(
                "Discarding unsaved result of session %s (%d/%d)",
                state.session_id,
                state.score,
                state.total_questions,
            )
        self._state = None
        self._listeners.notify(None)

    # --- Answering ---

    def select_answer(self, question_id: str, option_label: str) -> bool:
        """Record or overwrite the answer to the current question.

        Returns False when the session already finished.
        """
        state = self._require_session()
        if state.finished:
            return False
        if option_label not in OPTION_LABELS:
            raise ValidationError(f"Unknown option label {option_label!r}.")
        current = state.current_question
        if question_id != current.id:
            raise ValidationError(
                f"Question {question_id!r} is not the current question ({current.id!r})."
            )
        state.answers[question_id] = option_label
        self._listeners.notify(state)
        return True

    def advance(self) -> bool:
        """Score the current question, then move on or finish the session.

        Returns False when the session already finished.
        """
        state = self._require_session()
        if state.finished:
            logger.debug("Ignoring advance on finished session %s", state.session_id)
            return False
        question = state.current_question
        chosen = state.answers.get(question.id)
        if chosen is None and not state.is_last_question:
            raise ValidationError("Select an answer before moving to the next question.")

        if chosen == question.correct_option:
            state.score += 1

        if state.is_last_question:
            self._finalize(state, FinishReason.COMPLETED)
        else:
            state.current_index += 1
            self._listeners.notify(state)
        return True

    # --- Countdown ---

    def _tick(self, state: SessionState) -> None:
        if state is not self._state or state.finished:
            return
        state.remaining_seconds -= TICK_INTERVAL_SECONDS
        if state.remaining_seconds <= 0:
            state.remaining_seconds = 0
            self._finalize(state, FinishReason.EXPIRED)
            return
        self._listeners.notify(state)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # --- Finishing ---

    def _finalize(self, state: SessionState, reason: FinishReason) -> bool:
        if state.finished:
            logger.debug("Session %s already finished; %s ignored", state.session_id, reason.value)
            return False
        state.finished = True
        state.result_dialog_visible = True
        state.finish_reason = reason
        self._cancel_timer()

        record = AttemptRecord(
            user_id=self._user_id,
            test_id=state.test.id,
            score=state.score,
            total_questions=state.total_questions,
            session_started_at=state.session_started_at,
            submitted_at=self._scheduler.now(),
        )
        state.record = record
        logger.info(
            "User %s finished test %s (%s): %d/%d",
            self._user_id,
            state.test.id,
            reason.value,
            state.score,
            state.total_questions,
        )
        if reason is FinishReason.EXPIRED:
            self._notices.notify(Notice(NoticeLevel.INFO, "Time is up!", "Your test was submitted automatically."))
        else:
            self._notices.notify(Notice(NoticeLevel.SUCCESS, "Test completed! Calculating results..."))
        self._dispatch_submission(state, record)
        self._listeners.notify(state)
        return True

    def submit(self, record: AttemptRecord) -> None:
        """Write an attempt record through the attempt store.

        Raises:
            PersistenceError: the store rejected or failed the write.
        """
        try:
            self._attempt_store.insert_attempt(record)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Could not save result for test {record.test_id!r}.") from exc

    def retry_submission(self) -> None:
        """Write the finished session's record again after a failed attempt."""
        state = self._require_session()
        record = state.record
        if record is None or state.submission_status is not SubmissionStatus.FAILED:
            raise ValidationError("There is no failed submission to retry.")
        logger.info("Retrying submission for session %s", state.session_id)
        self._dispatch_submission(state, record)
        self._listeners.notify(state)

    def _dispatch_submission(self, state: SessionState, record: AttemptRecord) -> None:
        state.submission_status = SubmissionStatus.PENDING
        if self._executor is None:
            try:
                self.submit(record)
            except PersistenceError as exc:
                self._complete_submission(state, exc)
            else:
                self._complete_submission(state, None)
            return

        future = self._executor.submit(self.submit, record)

        def on_done(done: Future) -> None:
            error = done.exception()
            self._scheduler.call_soon(lambda: self._complete_submission(state, error))

        future.add_done_callback(on_done)

    def _complete_submission(self, state: SessionState, error: BaseException | None) -> None:
        if error is None:
            state.submission_status = SubmissionStatus.SAVED
            logger.info("Saved result of session %s", state.session_id)
            self._notices.notify(Notice(NoticeLevel.SUCCESS, "Result saved."))
        else:
            state.submission_status = SubmissionStatus.FAILED
            logger.warning("Saving result of session %s failed: %s", state.session_id, error)
            self._notices.notify(
                Notice(NoticeLevel.ERROR, "Your result could not be saved.", str(error))
            )
        if state is self._state:
            self._listeners.notify(state)

    def _require_session(self) -> SessionState:
        if self._state is None:
            raise ValidationError("No test session is active.")
        return self._state
