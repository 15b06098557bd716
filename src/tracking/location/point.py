from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class TrackedPosition:
    """A recorded driver position, detached from the aggregate."""

    order_id: str
    driver_id: str
    latitude: float
    longitude: float
    captured_at: datetime
    accuracy: float | None = None
    heading: float | None = None
    speed: float | None = None
    sample_id: str | None = None

    @property
    def point(self) -> LatLng:
        return LatLng(self.latitude, self.longitude)

    @classmethod
    def from_record(cls, record) -> "TrackedPosition":
        """Build from a LocationSample or a LocationRecorded event."""
        sample_id = getattr(record, "sample_id", None) or getattr(record, "id", None)
        return cls(
            order_id=str(record.order_id),
            driver_id=str(record.driver_id),
            latitude=record.latitude,
            longitude=record.longitude,
            captured_at=record.captured_at,
            accuracy=record.accuracy,
            heading=record.heading,
            speed=record.speed,
            sample_id=str(sample_id) if sample_id else None,
        )

    def to_dict(self) -> dict:
        return {
            "sample_id": self.sample_id,
            "order_id": self.order_id,
            "driver_id": self.driver_id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "heading": self.heading,
            "speed": self.speed,
            "captured_at": self.captured_at.isoformat() if self.captured_at else None,
        }
