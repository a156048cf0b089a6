"""
inbox/subscription.py
Real-time snapshot feed, decoupled from any backing store.

    feed = SnapshotFeed()
    unsubscribe = feed.subscribe(on_update, on_error)
    feed.publish(templates)      # every subscriber's on_update(templates)
    unsubscribe()

A late subscriber receives the latest snapshot immediately. A failing
callback is logged and reported to that subscriber's own on_error; the
other subscribers still get the snapshot.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[Any], None]
ErrorCallback  = Callable[[Exception], None]


class SnapshotFeed:

    def __init__(self, name: str = 'feed'):
        self.name = name
        self._lock = threading.Lock()
        self._subscribers: Dict[int, tuple] = {}
        self._next_token = 0
        self._latest: Any = None
        self._has_snapshot = False

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(
        self,
        on_update: UpdateCallback,
        on_error:  Optional[ErrorCallback] = None,
    ) -> Callable[[], None]:
        """Register callbacks. Returns an idempotent unsubscribe handle."""
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = (on_update, on_error)
            replay = self._has_snapshot
            latest = self._latest

        if replay:
            self._deliver(token, on_update, on_error, latest)

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def publish(self, snapshot: Any) -> None:
        with self._lock:
            self._latest = snapshot
            self._has_snapshot = True
            targets = list(self._subscribers.items())

        for token, (on_update, on_error) in targets:
            self._deliver(token, on_update, on_error, snapshot)

    def fail(self, error: Exception) -> None:
        """Route an upstream error to every subscriber's on_error."""
        logger.error(f"{self.name} subscription error: {error}")
        with self._lock:
            targets = list(self._subscribers.items())
        for token, (_on_update, on_error) in targets:
            self._report(token, on_error, error)

    def _deliver(self, token, on_update, on_error, snapshot) -> None:
        try:
            on_update(snapshot)
        except Exception as exc:
            logger.error(f"{self.name} subscriber {token} failed: {exc}", exc_info=True)
            self._report(token, on_error, exc)

    def _report(self, token, on_error, error: Exception) -> None:
        """Hand an error to one subscriber; a failing handler never stops the fan-out."""
        if on_error is None:
            return
        try:
            on_error(error)
        except Exception as exc:
            logger.error(f"{self.name} subscriber {token} error handler failed: {exc}", exc_info=True)
