"""In-process change feed.

Committed changes are published as deltas on one of four streams. Delivery is
synchronous, at most once and without replay: a subscriber only sees changes
published while it is subscribed. A failing subscriber is logged and skipped;
it never affects the publisher or other subscribers.
"""

import threading
from collections.abc import Callable
from enum import Enum
from itertools import count

import structlog

logger = structlog.get_logger(__name__)


class Stream(Enum):
    ORDERS = "orders"
    STOCK = "stock"
    NOTIFICATIONS = "notifications"
    COMMUNITY = "community"


class Subscription:
    """Handle returned by ``ChangeFeed.subscribe``. Close it on teardown."""

    def __init__(self, feed: "ChangeFeed", key: int, stream: Stream, callback: Callable, predicate: Callable | None):
        self._feed = feed
        self._key = key
        self.stream = stream
        self.callback = callback
        self.predicate = predicate
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self._feed._remove(self._key)
            self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _deliver(self, delta) -> None:
        try:
            if self.predicate is not None and not self.predicate(delta):
                return
            self.callback(delta)
        except Exception:
            logger.exception("Change feed subscriber failed", stream=self.stream.value)


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._keys = count(1)
        self._subscriptions: dict[int, Subscription] = {}

    def subscribe(self, stream, callback: Callable, predicate: Callable | None = None) -> Subscription:
        stream = Stream(stream)
        with self._lock:
            key = next(self._keys)
            subscription = Subscription(self, key, stream, callback, predicate)
            self._subscriptions[key] = subscription
        return subscription

    def publish(self, stream, delta) -> int:
        """Deliver ``delta`` to current subscribers of ``stream``. Returns how many were called."""
        stream = Stream(stream)
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.stream == stream]
        for subscription in targets:
            subscription._deliver(delta)
        return len(targets)

    def subscriber_count(self, stream=None) -> int:
        with self._lock:
            if stream is None:
                return len(self._subscriptions)
            stream = Stream(stream)
            return sum(1 for s in self._subscriptions.values() if s.stream == stream)

    def _remove(self, key: int) -> None:
        with self._lock:
            self._subscriptions.pop(key, None)


_feed = ChangeFeed()


def get_change_feed() -> ChangeFeed:
    return _feed


def reset_change_feed() -> ChangeFeed:
    """Drop every subscription. Used between tests."""
    global _feed
    _feed = ChangeFeed()
    return _feed
