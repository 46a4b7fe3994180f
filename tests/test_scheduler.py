from __future__ import annotations

import pytest

from exam_app.core.events import ListenerRegistry
from exam_app.core.scheduler import ManualScheduler


def test_periodic_task_fires_once_per_interval():
    scheduler = ManualScheduler()
    fired = []
    scheduler.call_every(2, lambda: fired.append(scheduler.now()))

    scheduler.advance(5)

    assert len(fired) == 2
    assert (fired[1] - fired[0]).total_seconds() == 2


def test_cancelled_task_never_fires_again():
    scheduler = ManualScheduler()
    fired = []
    task = scheduler.call_every(1, lambda: fired.append(1))
    scheduler.advance(1)

    task.cancel()
    task.cancel()
    scheduler.advance(10)

    assert fired == [1]
    assert not task.active
    assert scheduler.active_task_count() == 0


def test_task_can_cancel_itself_from_its_callback():
    scheduler = ManualScheduler()
    fired = []

    def callback():
        fired.append(1)
        task.cancel()

    task = scheduler.call_every(1, callback)
    scheduler.advance(5)

    assert fired == [1]


def test_call_soon_runs_on_next_drain():
    scheduler = ManualScheduler()
    calls = []
    scheduler.call_soon(lambda: calls.append("first"))
    scheduler.call_soon(lambda: scheduler.call_soon(lambda: calls.append("nested")))

    assert calls == []
    scheduler.run_pending()

    assert calls == ["first", "nested"]


def test_non_positive_interval_is_rejected():
    with pytest.raises(ValueError):
        ManualScheduler().call_every(0, lambda: None)


def test_unsubscribed_listener_is_not_called():
    registry: ListenerRegistry[int] = ListenerRegistry()
    seen = []
    subscription = registry.subscribe(seen.append)

    registry.notify(1)
    subscription.unsubscribe()
    registry.notify(2)

    assert seen == [1]
    assert len(registry) == 0
