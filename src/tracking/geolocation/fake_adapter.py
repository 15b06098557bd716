"""Fake geolocation source driven by tests and local development."""

from itertools import count

from tracking.geolocation.port import GeolocationSource, PositionFix, WatchOptions


class FakeGeolocation(GeolocationSource):
    def __init__(self, supported: bool = True) -> None:
        self._supported = supported
        self._handles = count(1)
        self.watches: dict[int, tuple] = {}
        self.last_options: WatchOptions | None = None

    @property
    def supported(self) -> bool:
        return self._supported

    def watch_position(self, on_success, on_error, options: WatchOptions) -> int:
        handle = next(self._handles)
        self.watches[handle] = (on_success, on_error)
        self.last_options = options
        return handle

    def clear_watch(self, handle: int) -> None:
        self.watches.pop(handle, None)

    @property
    def active_watches(self) -> int:
        return len(self.watches)

    def emit(self, latitude: float, longitude: float, **extra) -> PositionFix:
        """Deliver a fix to every active watch."""
        fix = PositionFix(latitude=latitude, longitude=longitude, **extra)
        for on_success, _ in list(self.watches.values()):
            on_success(fix)
        return fix

    def fail(self, message: str) -> None:
        for _, on_error in list(self.watches.values()):
            on_error(message)
