"""Customer-side view of one order's delivery.

open() subscribes before reading history, so a sample recorded in between is
never missed; duplicates from the overlap are dropped. Samples are kept in
capture order whatever order they arrive in.
"""

import bisect
import threading
from collections.abc import Callable

from tracking.location.feed import Subscription
from tracking.location.point import LatLng, TrackedPosition
from tracking.location.store import LocationStore
from tracking.viewer.route import STORE_LOCATION, build_route


class DeliveryTrackingSubscriber:
    def __init__(
        self,
        order_id: str,
        locations: LocationStore | None = None,
        store_location: LatLng = STORE_LOCATION,
        on_update: Callable[["DeliveryTrackingSubscriber"], None] | None = None,
    ) -> None:
        self.order_id = str(order_id)
        self.locations = locations or LocationStore()
        self.store_location = store_location
        self.on_update = on_update
        self.route_history: list[TrackedPosition] = []
        self.current_position: TrackedPosition | None = None
        self._seen: set = set()
        self._subscription: Subscription | None = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._subscription is not None

    @property
    def waiting_for_driver(self) -> bool:
        return not self.route_history

    def open(self) -> "DeliveryTrackingSubscriber":
        if self._subscription is None:
            self._subscription = self.locations.subscribe(self.order_id, self._on_position)
            for position in self.locations.history(self.order_id):
                self._add(position)
        return self

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self) -> "DeliveryTrackingSubscriber":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _on_position(self, position: TrackedPosition) -> None:
        if self._add(position) and self.on_update is not None:
            self.on_update(self)

    def _add(self, position: TrackedPosition) -> bool:
        key = position.sample_id or (position.captured_at, position.latitude, position.longitude)
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            bisect.insort(self.route_history, position, key=lambda p: p.captured_at)
            self.current_position = self.route_history[-1]
        return True

    def route(self) -> list[LatLng]:
        with self._lock:
            history = [position.point for position in self.route_history]
            live = self.current_position.point if self.current_position else None
        return build_route(self.store_location, history, live)
