"""Device geolocation port: continuous position watching."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

NOT_SUPPORTED_MESSAGE = "Geolocation is not supported on this device"


@dataclass(frozen=True)
class WatchOptions:
    high_accuracy: bool = True
    timeout_ms: int = 15000
    maximum_age_ms: int = 0


@dataclass(frozen=True)
class PositionFix:
    latitude: float
    longitude: float
    accuracy: float | None = None
    heading: float | None = None
    speed: float | None = None
    timestamp: datetime | None = None


class GeolocationSource(ABC):
    @property
    @abstractmethod
    def supported(self) -> bool:
        """False when the platform has no location capability."""
        ...

    @abstractmethod
    def watch_position(
        self,
        on_success: Callable[[PositionFix], None],
        on_error: Callable[[str], None],
        options: WatchOptions,
    ) -> int:
        """Start watching; returns a handle for clear_watch()."""
        ...

    @abstractmethod
    def clear_watch(self, handle: int) -> None: ...
