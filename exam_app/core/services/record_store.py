"""Record-store contracts and the in-memory store used by the portal.

The session engine and the leaderboard only see the narrow protocols defined
here. ``InMemoryRecordStore`` implements all of them and is what the desktop
app and the API server share; a database-backed store would implement the
same protocols.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Iterable, Protocol

from exam_app.constants.session_constants import OPTION_LABELS
from exam_app.core.errors import NotFound
from exam_app.core.events import ListenerRegistry, Subscription
from exam_app.core.models import AttemptRecord, Profile, Question, Test

logger = logging.getLogger(__name__)


class QuestionStore(Protocol):
    def fetch_questions(self, test_id: str) -> list[Question]: ...


class AttemptStore(Protocol):
    def insert_attempt(self, record: AttemptRecord) -> None: ...

    def fetch_all_attempts(self, test_filter: str | None = None) -> list[AttemptRecord]: ...

    def subscribe_attempts(self, listener: Callable[[AttemptRecord], None]) -> Subscription: ...


class ProfileStore(Protocol):
    def lookup(self, user_id: str) -> Profile | None: ...

    def subscribe_profiles(self, listener: Callable[[Profile], None]) -> Subscription: ...


class TestCatalog(Protocol):
    def list_tests(self, class_name: str | None = None) -> list[Test]: ...

    def get_test(self, test_id: str) -> Test: ...


class InMemoryRecordStore:
    """Thread-safe store for tests, questions, attempts and profiles."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._tests: dict[str, Test] = {}
        self._questions: dict[str, list[Question]] = {}
        self._attempts: list[AttemptRecord] = []
        self._profiles: dict[str, Profile] = {}
        self._attempt_listeners: ListenerRegistry[AttemptRecord] = ListenerRegistry()
        self._profile_listeners: ListenerRegistry[Profile] = ListenerRegistry()

    # --- Test catalog ---

    def add_test(self, test: Test, questions: Iterable[Question] = ()) -> None:
        """Publish a test together with its ordered questions."""
        self._validate_test(test)
        prepared = [self._validate_question(test.id, question) for question in questions]
        with self._lock:
            self._tests[test.id] = test
            self._questions[test.id] = prepared
        logger.info("Published test %s (%s) with %d questions", test.id, test.title, len(prepared))

    def list_tests(self, class_name: str | None = None) -> list[Test]:
        with self._lock:
            tests = list(self._tests.values())
        if class_name is not None:
            tests = [test for test in tests if test.class_name == class_name]
        return sorted(tests, key=lambda t: (t.subject, t.title))

    def get_test(self, test_id: str) -> Test:
        with self._lock:
            test = self._tests.get(test_id)
        if test is None:
            raise NotFound(f"Test {test_id!r} does not exist.")
        return test

    # --- Question store ---

    def fetch_questions(self, test_id: str) -> list[Question]:
        """Return the questions of a test in their stored order."""
        with self._lock:
            return list(self._questions.get(test_id, []))

    # --- Attempt store ---

    def insert_attempt(self, record: AttemptRecord) -> None:
        with self._lock:
            self._attempts.append(record)
        logger.info(
            "Stored attempt for user %s on test %s: %d/%d",
            record.user_id,
            record.test_id,
            record.score,
            record.total_questions,
        )
        self._attempt_listeners.notify(record)

    def fetch_all_attempts(self, test_filter: str | None = None) -> list[AttemptRecord]:
        with self._lock:
            attempts = list(self._attempts)
        if test_filter is not None:
            attempts = [a for a in attempts if a.test_id == test_filter]
        return attempts

    def subscribe_attempts(self, listener: Callable[[AttemptRecord], None]) -> Subscription:
        return self._attempt_listeners.subscribe(listener)

    # --- Profile store ---

    def upsert_profile(self, profile: Profile) -> None:
        with self._lock:
            self._profiles[profile.user_id] = profile
        self._profile_listeners.notify(profile)

    def lookup(self, user_id: str) -> Profile | None:
        with self._lock:
            return self._profiles.get(user_id)

    def subscribe_profiles(self, listener: Callable[[Profile], None]) -> Subscription:
        return self._profile_listeners.subscribe(listener)

    # --- Validation ---

    @staticmethod
    def _validate_test(test: Test) -> None:
        if not test.id:
            raise ValueError("Test identifier must not be empty.")
        if not test.title.strip():
            raise ValueError("Test title must not be empty.")
        if not isinstance(test.duration_minutes, int) or test.duration_minutes <= 0:
            raise ValueError("Duration must be a positive whole number of minutes.")

    @staticmethod
    def _validate_question(test_id: str, question: Question) -> Question:
        if question.test_id != test_id:
            raise ValueError(f"Question {question.id} belongs to test {question.test_id}, not {test_id}.")
        if not question.question_text.strip():
            raise ValueError("Question text must not be empty.")
        if len(question.options) != len(OPTION_LABELS):
            raise ValueError("Each question must have exactly four options.")
        if any(not option.strip() for option in question.options):
            raise ValueError("Option text cannot be empty.")
        if question.correct_option not in OPTION_LABELS:
            raise ValueError("Correct option must be one of A, B, C, or D.")
        return question
