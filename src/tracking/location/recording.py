"""Location recording: command and handler."""

from protean import handle
from protean.fields import DateTime, Float, Identifier
from protean.utils.globals import current_domain

from tracking.domain import tracking
from tracking.location.sample import LocationSample


@tracking.command(part_of="LocationSample")
class RecordLocation:
    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    latitude = Float(required=True)
    longitude = Float(required=True)
    accuracy = Float()
    heading = Float()
    speed = Float()
    captured_at = DateTime()


@tracking.command_handler(part_of=LocationSample)
class RecordLocationHandler:
    @handle(RecordLocation)
    def record_location(self, command):
        sample = LocationSample.record(
            order_id=command.order_id,
            driver_id=command.driver_id,
            latitude=command.latitude,
            longitude=command.longitude,
            accuracy=command.accuracy,
            heading=command.heading,
            speed=command.speed,
            captured_at=command.captured_at,
        )
        current_domain.repository_for(LocationSample).add(sample)
        return str(sample.id)
