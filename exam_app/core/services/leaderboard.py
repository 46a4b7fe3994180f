"""Service deriving the top-performers ranking from attempt history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from threading import Lock, RLock
from typing import Callable, Iterable

from exam_app.constants.session_constants import LEADERBOARD_SIZE, UNKNOWN_PLACEHOLDER
from exam_app.core.errors import NotFound
from exam_app.core.events import ListenerRegistry, Subscription
from exam_app.core.models import AttemptRecord, LeaderboardEntry, Profile, Test
from exam_app.core.services.record_store import AttemptStore, ProfileStore, TestCatalog

logger = logging.getLogger(__name__)

ProfileLookup = Callable[[str], Profile | None]
TitleLookup = Callable[[str], str | None]


@dataclass(slots=True)
class _Candidate:
    """Best qualifying attempt of one user, used while folding."""

    record: AttemptRecord
    elapsed_seconds: float

    def beats(self, other: _Candidate) -> bool:
        """Faster wins; on equal time the higher score wins; otherwise no change."""
        if self.elapsed_seconds != other.elapsed_seconds:
            return self.elapsed_seconds < other.elapsed_seconds
        return self.record.score > other.record.score

    def sort_key(self) -> tuple[float, int]:
        return (self.elapsed_seconds, -self.record.score)


def rank(
    attempts: Iterable[AttemptRecord],
    lookup_profile: ProfileLookup,
    limit: int = LEADERBOARD_SIZE,
    lookup_test_title: TitleLookup | None = None,
) -> list[LeaderboardEntry]:
    """Reduce attempt history to the top ``limit`` users.

    Speed dominates: entries are ordered by ascending elapsed time and only
    then by descending score. Attempts without a usable elapsed time are not
    eligible.
    """
    best: dict[str, _Candidate] = {}
    for record in attempts:
        elapsed = record.elapsed_seconds()
        if elapsed is None or elapsed < 0:
            continue
        candidate = _Candidate(record=record, elapsed_seconds=elapsed)
        current = best.get(record.user_id)
        if current is None or candidate.beats(current):
            best[record.user_id] = candidate

    # sorted() is stable, so ties keep first-folded order
    ordered = sorted(best.values(), key=_Candidate.sort_key)[: max(0, limit)]
    return [
        _build_entry(position, candidate, lookup_profile, lookup_test_title)
        for position, candidate in enumerate(ordered, start=1)
    ]


def _build_entry(
    position: int,
    candidate: _Candidate,
    lookup_profile: ProfileLookup,
    lookup_test_title: TitleLookup | None,
) -> LeaderboardEntry:
    record = candidate.record
    profile = lookup_profile(record.user_id)
    title = lookup_test_title(record.test_id) if lookup_test_title else None
    submitted_at: datetime = record.submitted_at  # eligible records always have one
    return LeaderboardEntry(
        rank=position,
        user_id=record.user_id,
        display_name=_or_unknown(profile.display_name if profile else None),
        class_name=_or_unknown(profile.class_name if profile else None),
        avatar_url=_or_unknown(profile.avatar_url if profile else None),
        score=record.score,
        total_questions=record.total_questions,
        test_title=_or_unknown(title),
        elapsed_seconds=candidate.elapsed_seconds,
        submitted_at=submitted_at,
    )


def _or_unknown(value: str | None) -> str:
    if value is None or not value.strip():
        return UNKNOWN_PLACEHOLDER
    return value


class Leaderboard:
    """Keeps a ranking current by recomputing it on every store change."""

    def __init__(
        self,
        attempt_store: AttemptStore,
        profile_store: ProfileStore,
        catalog: TestCatalog | None = None,
        limit: int = LEADERBOARD_SIZE,
        test_filter: str | None = None,
    ) -> None:
        self._attempt_store = attempt_store
        self._profile_store = profile_store
        self._catalog = catalog
        self._limit = limit
        self._test_filter = test_filter
        self._lock = Lock()
        self._refresh_lock = RLock()
        self._entries: list[LeaderboardEntry] = []
        self._listeners: ListenerRegistry[list[LeaderboardEntry]] = ListenerRegistry()
        self._store_subscriptions: list[Subscription] = []

    def start(self) -> list[LeaderboardEntry]:
        """Subscribe to store changes and compute the initial ranking."""
        if not self._store_subscriptions:
            self._store_subscriptions = [
                self._attempt_store.subscribe_attempts(lambda _record: self.refresh()),
                self._profile_store.subscribe_profiles(lambda _profile: self.refresh()),
            ]
        return self.refresh()

    def dispose(self) -> None:
        for subscription in self._store_subscriptions:
            subscription.unsubscribe()
        self._store_subscriptions = []

    def subscribe(self, listener: Callable[[list[LeaderboardEntry]], None]) -> Subscription:
        return self._listeners.subscribe(listener)

    def set_limit(self, limit: int) -> None:
        self._limit = max(1, limit)
        self.refresh()

    def get_entries(self) -> list[LeaderboardEntry]:
        with self._lock:
            return list(self._entries)

    def refresh(self) -> list[LeaderboardEntry]:
        """Recompute the ranking over the full history."""
        # fetch, rank and publish under one lock
        with self._refresh_lock:
            try:
                attempts = self._attempt_store.fetch_all_attempts(self._test_filter)
                entries = rank(attempts, self._profile_store.lookup, self._limit, self._lookup_title)
            except Exception:
                logger.exception("Leaderboard refresh failed; showing an empty ranking")
                entries = []
            with self._lock:
                self._entries = entries
            self._listeners.notify(list(entries))
        return list(entries)

    def _lookup_title(self, test_id: str) -> str | None:
        if self._catalog is None:
            return None
        try:
            test: Test = self._catalog.get_test(test_id)
        except NotFound:
            return None
        return test.title
