from protean.utils.globals import current_domain

from tracking.location.point import TrackedPosition
from tracking.location.sample import LocationSample

MAX_HISTORY_SAMPLES = 10_000


def location_history(order_id) -> list[TrackedPosition]:
    """Samples for the order in capture order.

    Past the cap the oldest samples are dropped, never the newest, so the
    last entry is always the driver's current position.
    """
    repo = current_domain.repository_for(LocationSample)
    newest_first = (
        repo._dao.query.filter(order_id=str(order_id))
        .order_by("-captured_at")
        .limit(MAX_HISTORY_SAMPLES)
        .all()
        .items
    )
    return [TrackedPosition.from_record(sample) for sample in reversed(newest_first)]
