"""Pushes every recorded sample to the realtime feed."""

from protean import handle

from tracking.domain import tracking
from tracking.location.events import LocationRecorded
from tracking.location.feed import get_location_feed
from tracking.location.point import TrackedPosition
from tracking.location.sample import LocationSample


@tracking.event_handler(part_of=LocationSample)
class LocationBroadcastHandler:
    @handle(LocationRecorded)
    def broadcast(self, event: LocationRecorded) -> None:
        get_location_feed().publish(TrackedPosition.from_record(event))
