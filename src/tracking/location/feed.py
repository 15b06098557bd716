"""In-process realtime feed of recorded positions, keyed by order.

A subscription is a scoped handle: unsubscribing (or leaving its ``with``
block) detaches the handler, and doing so twice is harmless.
"""

import threading
from collections import defaultdict
from collections.abc import Callable

import structlog

from tracking.location.point import TrackedPosition

logger = structlog.get_logger(__name__)

PositionHandler = Callable[[TrackedPosition], None]


class Subscription:
    def __init__(self, feed: "LocationFeed", order_id: str, handler: PositionHandler) -> None:
        self.feed = feed
        self.order_id = order_id
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self.feed._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class LocationFeed:
    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscription]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, order_id, handler: PositionHandler) -> Subscription:
        subscription = Subscription(self, str(order_id), handler)
        with self._lock:
            self._subscriptions[subscription.order_id].append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscriptions = self._subscriptions.get(subscription.order_id, [])
            if subscription in subscriptions:
                subscriptions.remove(subscription)
            if not subscriptions:
                self._subscriptions.pop(subscription.order_id, None)

    def subscriber_count(self, order_id) -> int:
        with self._lock:
            return len(self._subscriptions.get(str(order_id), []))

    def publish(self, position: TrackedPosition) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions.get(position.order_id, []))

        for subscription in subscriptions:
            if not subscription.active:
                continue
            try:
                subscription.handler(position)
            except Exception as exc:
                logger.exception("location_subscriber_failed", order_id=position.order_id, error=str(exc))


_current_feed: LocationFeed | None = None


def get_location_feed() -> LocationFeed:
    global _current_feed
    if _current_feed is None:
        _current_feed = LocationFeed()
    return _current_feed


def reset_location_feed() -> None:
    global _current_feed
    _current_feed = None
