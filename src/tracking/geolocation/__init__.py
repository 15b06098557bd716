"""Geolocation source registry. Defaults to the fake source."""

from tracking.geolocation.fake_adapter import FakeGeolocation
from tracking.geolocation.port import GeolocationSource

_current_source: GeolocationSource | None = None


def get_geolocation() -> GeolocationSource:
    global _current_source
    if _current_source is None:
        _current_source = FakeGeolocation()
    return _current_source


def set_geolocation(source: GeolocationSource) -> None:
    global _current_source
    _current_source = source


def reset_geolocation() -> None:
    global _current_source
    _current_source = None
