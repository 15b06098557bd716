"""Domain events for the LocationSample aggregate."""

from protean.fields import DateTime, Float, Identifier

from tracking.domain import tracking


@tracking.event(part_of="LocationSample")
class LocationRecorded:
    """A driver position was appended for an order."""

    __version__ = 1

    sample_id = Identifier(required=True)
    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    latitude = Float(required=True)
    longitude = Float(required=True)
    accuracy = Float()
    heading = Float()
    speed = Float()
    captured_at = DateTime(required=True)
