"""LocationSample aggregate: one GPS fix recorded during a delivery.

Samples are append-only. Nothing updates or deletes them; the current driver
position for an order is simply its most recently captured sample.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, Identifier

from tracking.domain import tracking
from tracking.location.events import LocationRecorded


@tracking.aggregate
class LocationSample:
    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    latitude = Float(required=True, min_value=-90.0, max_value=90.0)
    longitude = Float(required=True, min_value=-180.0, max_value=180.0)
    accuracy = Float(min_value=0.0)
    heading = Float()
    speed = Float()
    captured_at = DateTime(required=True)

    @classmethod
    def record(cls, order_id, driver_id, latitude, longitude, accuracy=None, heading=None, speed=None, captured_at=None):
        sample = cls(
            order_id=order_id,
            driver_id=driver_id,
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            heading=heading,
            speed=speed,
            captured_at=captured_at or datetime.now(UTC),
        )
        sample.raise_(
            LocationRecorded(
                sample_id=str(sample.id),
                order_id=str(order_id),
                driver_id=str(driver_id),
                latitude=sample.latitude,
                longitude=sample.longitude,
                accuracy=sample.accuracy,
                heading=sample.heading,
                speed=sample.speed,
                captured_at=sample.captured_at,
            )
        )
        return sample
