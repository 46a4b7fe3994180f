"""Business logic shared between the student UI and the API.

The manager is the error boundary of the core: ``NotFound`` and
``PersistenceError`` never escape it. They become ``Notice`` objects for
whatever front end is listening, and the operation reports failure through
its return value instead.
"""

from __future__ import annotations

from concurrent.futures import Executor
import logging
from typing import Callable

from exam_app.constants.session_constants import LEADERBOARD_SIZE
from exam_app.core.errors import NotFound, PersistenceError
from exam_app.core.events import ListenerRegistry, Subscription
from exam_app.core.models import (
    LeaderboardEntry,
    Notice,
    NoticeLevel,
    Profile,
    ResultRow,
    SessionState,
    Test,
)
from exam_app.core.scheduler import Scheduler
from exam_app.core.services.leaderboard import Leaderboard, rank
from exam_app.core.services.record_store import InMemoryRecordStore
from exam_app.core.services.results_history import user_results
from exam_app.core.services.session_engine import SessionEngine

logger = logging.getLogger(__name__)


class PortalManager:
    """Facade for the record store, session engine, and leaderboard."""

    def __init__(
        self,
        store: InMemoryRecordStore,
        user_id: str,
        scheduler: Scheduler,
        executor: Executor | None = None,
        leaderboard_size: int = LEADERBOARD_SIZE,
    ) -> None:
        self._store = store
        self._user_id = user_id
        self._notices: ListenerRegistry[Notice] = ListenerRegistry()
        self._session = SessionEngine(
            user_id=user_id,
            question_store=store,
            attempt_store=store,
            scheduler=scheduler,
            executor=executor,
        )
        self._session.subscribe_notices(self._notices.notify)
        self._leaderboard_size = leaderboard_size
        self._leaderboard = Leaderboard(store, store, catalog=store, limit=leaderboard_size)

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def session(self) -> SessionEngine:
        return self._session

    @property
    def leaderboard(self) -> Leaderboard:
        return self._leaderboard

    def subscribe_notices(self, listener: Callable[[Notice], None]) -> Subscription:
        return self._notices.subscribe(listener)

    def get_profile(self) -> Profile | None:
        return self._store.lookup(self._user_id)

    # --- Test selection ---

    def list_tests(self) -> list[Test]:
        """Tests published for the current student's class."""
        profile = self.get_profile()
        class_name = profile.class_name if profile else None
        if not class_name:
            logger.warning("User %s has no class; listing no tests", self._user_id)
            self._report(NoticeLevel.INFO, "Your profile has no class yet.", "Ask your teacher to assign one.")
            return []
        try:
            return self._store.list_tests(class_name)
        except Exception as exc:
            logger.exception("Loading tests failed")
            self._report(NoticeLevel.ERROR, "Failed to load tests.", str(exc))
            return []

    # --- Session delegation ---

    def begin_test(self, test_id: str) -> SessionState | None:
        """Load a test and start a session; None when it cannot start."""
        try:
            test = self._store.get_test(test_id)
            questions = self._session.load_test(test_id)
        except NotFound as exc:
            logger.warning("Cannot start test %s: %s", test_id, exc)
            self._report(NoticeLevel.ERROR, "This test has no questions yet.", str(exc))
            return None
        except PersistenceError as exc:
            logger.warning("Cannot start test %s: %s", test_id, exc)
            self._report(NoticeLevel.ERROR, "Failed to load the test.", str(exc))
            return None
        return self._session.start(test, questions)

    def get_session_state(self) -> SessionState | None:
        return self._session.state

    def select_answer(self, question_id: str, option_label: str) -> bool:
        return self._session.select_answer(question_id, option_label)

    def advance(self) -> bool:
        return self._session.advance()

    def leave_test(self) -> None:
        self._session.dispose()

    def retry_submission(self) -> None:
        self._session.retry_submission()

    # --- Ranking and results ---

    def start_leaderboard(self) -> list[LeaderboardEntry]:
        return self._leaderboard.start()

    def get_leaderboard(self, limit: int | None = None, test_id: str | None = None) -> list[LeaderboardEntry]:
        """Compute a ranking on demand; store failures yield an empty list."""
        try:
            attempts = self._store.fetch_all_attempts(test_id)
            size = limit if limit is not None else self._leaderboard_size
            return rank(attempts, self._store.lookup, size, self._title_for)
        except Exception:
            logger.exception("Leaderboard computation failed")
            return []

    def get_results(self, user_id: str | None = None) -> list[ResultRow]:
        target = user_id or self._user_id
        try:
            attempts = self._store.fetch_all_attempts()
        except Exception as exc:
            logger.exception("Loading results for %s failed", target)
            self._report(NoticeLevel.ERROR, "Failed to load objective test results.", str(exc))
            return []
        return user_results(attempts, target, self._find_test)

    def list_all_tests(self, class_name: str | None = None) -> list[Test]:
        return self._store.list_tests(class_name)

    def get_test(self, test_id: str) -> Test:
        return self._store.get_test(test_id)

    def shutdown(self) -> None:
        self._session.dispose()
        self._leaderboard.dispose()

    # --- Helpers ---

    def _find_test(self, test_id: str) -> Test | None:
        try:
            return self._store.get_test(test_id)
        except NotFound:
            return None

    def _title_for(self, test_id: str) -> str | None:
        test = self._find_test(test_id)
        return test.title if test else None

    def _report(self, level: NoticeLevel, title: str, message: str = "") -> None:
        self._notices.notify(Notice(level, title, message))
