"""Scheduler implementation backed by the Qt event loop."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from PySide6.QtCore import QObject, Qt, QTimer, Signal, Slot

from exam_app.core.scheduler import PeriodicTask, Scheduler


class _CallBridge(QObject):
    """Delivers callables onto the thread that owns this object."""

    invoke = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.invoke.connect(self._run, Qt.QueuedConnection)

    @Slot(object)
    def _run(self, callback: Callable[[], None]) -> None:
        callback()


class QtScheduler(Scheduler):
    """Runs periodic tasks with ``QTimer``. Create it on the GUI thread."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._bridge = _CallBridge(parent)

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def call_every(self, interval_seconds: float, callback: Callable[[], None]) -> PeriodicTask:
        task = PeriodicTask(callback, interval_seconds)
        timer = QTimer(self._bridge)
        timer.setInterval(int(interval_seconds * 1000))

        def fire() -> None:
            if task.active:
                task.callback()

        def stop() -> None:
            timer.stop()
            timer.deleteLater()

        timer.timeout.connect(fire)
        task.bind_cancel(stop)
        timer.start()
        return task

    def call_soon(self, callback: Callable[[], None]) -> None:
        self._bridge.invoke.emit(callback)
