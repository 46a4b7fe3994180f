"""Scheduler abstraction used to drive session countdowns.

Architecture note:
    The session engine never touches a real timer. It registers a periodic
    task with a ``Scheduler`` and keeps the returned ``PeriodicTask`` handle so
    disposal can cancel it unconditionally. The Qt window supplies a
    ``QTimer``-backed scheduler (see ``exam_app.ui.qt_scheduler``); tests use
    ``ManualScheduler``, which owns a fake clock and only fires callbacks when
    time is advanced explicitly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime, timedelta, timezone
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Handle for a repeating callback registered with a scheduler."""

    def __init__(self, callback: Callable[[], None], interval_seconds: float) -> None:
        self.callback = callback
        self.interval_seconds = interval_seconds
        self._active = True
        self._on_cancel: Callable[[], None] | None = None

    @property
    def active(self) -> bool:
        return self._active

    def bind_cancel(self, on_cancel: Callable[[], None]) -> None:
        self._on_cancel = on_cancel

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._on_cancel is not None:
            self._on_cancel()


class Scheduler(ABC):
    """Single-threaded event queue with a clock."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current wall-clock time."""

    @abstractmethod
    def call_every(self, interval_seconds: float, callback: Callable[[], None]) -> PeriodicTask:
        """Run ``callback`` every ``interval_seconds`` until the task is cancelled."""

    @abstractmethod
    def call_soon(self, callback: Callable[[], None]) -> None:
        """Queue ``callback`` on the scheduler thread. Safe to call from any thread."""


class ManualScheduler(Scheduler):
    """Deterministic scheduler with a fake clock for tests and headless runs."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        self._tasks: list[tuple[PeriodicTask, datetime]] = []
        self._queue: deque[Callable[[], None]] = deque()

    def now(self) -> datetime:
        return self._now

    def call_every(self, interval_seconds: float, callback: Callable[[], None]) -> PeriodicTask:
        if interval_seconds <= 0:
            raise ValueError("Interval must be positive.")
        task = PeriodicTask(callback, interval_seconds)
        self._tasks.append((task, self._now + timedelta(seconds=interval_seconds)))
        return task

    def call_soon(self, callback: Callable[[], None]) -> None:
        self._queue.append(callback)

    def active_task_count(self) -> int:
        return sum(1 for task, _ in self._tasks if task.active)

    def run_pending(self) -> None:
        """Run every queued ``call_soon`` callback, including ones queued meanwhile."""
        while self._queue:
            self._queue.popleft()()

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due periodic callbacks in order."""
        target = self._now + timedelta(seconds=seconds)
        self.run_pending()
        while True:
            self._tasks = [(task, due) for task, due in self._tasks if task.active]
            due_tasks = [(due, index) for index, (_, due) in enumerate(self._tasks) if due <= target]
            if not due_tasks:
                break
            due, index = min(due_tasks)
            task, _ = self._tasks[index]
            self._now = due
            self._tasks[index] = (task, due + timedelta(seconds=task.interval_seconds))
            task.callback()
            self.run_pending()
        self._now = target
