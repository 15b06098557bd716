from tracking.location.point import LatLng

# Dar es Salaam shop, where every delivery starts
STORE_LOCATION = LatLng(-6.7924, 39.2083)


def build_route(store: LatLng, history: list[LatLng], live: LatLng | None = None) -> list[LatLng]:
    """Store first, then the samples in capture order, then the live position unless it is already last."""
    route = [store, *history]
    if live is not None and (not history or history[-1] != live):
        route.append(live)
    return route
