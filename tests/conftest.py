from __future__ import annotations

from concurrent.futures import Executor, Future
from datetime import datetime, timedelta, timezone

import pytest

from exam_app.core.models import AttemptRecord, Profile, Question, Test
from exam_app.core.scheduler import ManualScheduler
from exam_app.core.services.record_store import InMemoryRecordStore

START = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)
CORRECT_LABELS = ("C", "B", "D", "B", "B")


def make_test(test_id: str = "gk", duration_minutes: int = 10, class_name: str = "8") -> Test:
    return Test(
        id=test_id,
        class_name=class_name,
        subject="General Studies",
        title=f"Test {test_id}",
        description="",
        duration_minutes=duration_minutes,
    )


def make_questions(test_id: str = "gk", correct_labels: tuple[str, ...] = CORRECT_LABELS) -> list[Question]:
    return [
        Question(
            id=f"{test_id}-q{number}",
            test_id=test_id,
            question_text=f"Question {number}?",
            options=("one", "two", "three", "four"),
            correct_option=label,
        )
        for number, label in enumerate(correct_labels, start=1)
    ]


def make_attempt(
    user_id: str,
    elapsed_seconds: float | None,
    score: int,
    test_id: str = "gk",
    total: int = 10,
    started: datetime = START,
) -> AttemptRecord:
    submitted = None if elapsed_seconds is None else started + timedelta(seconds=elapsed_seconds)
    return AttemptRecord(
        user_id=user_id,
        test_id=test_id,
        score=score,
        total_questions=total,
        session_started_at=started,
        submitted_at=submitted,
    )


class DeferredExecutor(Executor):
    """Executor that only runs submitted work when told to."""

    def __init__(self) -> None:
        self.pending: list[tuple[Future, object, tuple, dict]] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_all(self) -> None:
        pending, self.pending = self.pending, []
        for future, fn, args, kwargs in pending:
            try:
                result = fn(*args, **kwargs)
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)


class FailingAttemptStore(InMemoryRecordStore):
    """Store whose attempt writes fail a given number of times."""

    def __init__(self, failures: int = 1) -> None:
        super().__init__()
        self.failures = failures
        self.insert_calls = 0

    def insert_attempt(self, record: AttemptRecord) -> None:
        self.insert_calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionError("network unreachable")
        super().insert_attempt(record)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler(start=START)


@pytest.fixture
def store() -> InMemoryRecordStore:
    store = InMemoryRecordStore()
    store.add_test(make_test("gk"), make_questions("gk"))
    store.add_test(make_test("quick", duration_minutes=1), make_questions("quick", ("A",)))
    store.add_test(make_test("empty"), [])
    store.add_test(make_test("other-class", class_name="9"), make_questions("other-class", ("A", "B")))
    store.upsert_profile(Profile(user_id="student-1", display_name="Asha", class_name="8", avatar_url="asha.png"))
    return store
