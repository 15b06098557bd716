"""Location store facade: append, read back and subscribe.

Pushes the tracking domain context itself so it can be called from asyncio
tasks, geolocation callbacks and the other bounded contexts.
"""

from tracking.domain import tracking
from tracking.location.feed import PositionHandler, Subscription, get_location_feed
from tracking.location.history import location_history
from tracking.location.point import TrackedPosition
from tracking.location.recording import RecordLocation


class LocationStore:
    def insert(
        self,
        order_id,
        driver_id,
        latitude,
        longitude,
        accuracy=None,
        heading=None,
        speed=None,
        captured_at=None,
    ) -> str:
        with tracking.domain_context():
            return tracking.process(
                RecordLocation(
                    order_id=order_id,
                    driver_id=driver_id,
                    latitude=latitude,
                    longitude=longitude,
                    accuracy=accuracy,
                    heading=heading,
                    speed=speed,
                    captured_at=captured_at,
                ),
                asynchronous=False,
            )

    def history(self, order_id) -> list[TrackedPosition]:
        with tracking.domain_context():
            return location_history(order_id)

    def subscribe(self, order_id, handler: PositionHandler) -> Subscription:
        return get_location_feed().subscribe(order_id, handler)
