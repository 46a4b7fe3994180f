"""Change-listener registration with explicit unsubscribe handles."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by ``subscribe``; ``unsubscribe`` is idempotent."""

    def __init__(self, unsubscribe: Callable[[], None]) -> None:
        self._unsubscribe = unsubscribe
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._unsubscribe()


class ListenerRegistry(Generic[T]):
    """Keeps listeners in registration order and fans out notifications."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._listeners: dict[int, Callable[[T], None]] = {}
        self._next_key = 0

    def subscribe(self, listener: Callable[[T], None]) -> Subscription:
        with self._lock:
            key = self._next_key
            self._next_key += 1
            self._listeners[key] = listener

        def remove() -> None:
            with self._lock:
                self._listeners.pop(key, None)

        return Subscription(remove)

    def notify(self, value: T) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(value)
            except Exception:
                # remaining listeners still run
                logger.exception("Listener %r failed", listener)

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)
