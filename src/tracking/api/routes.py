"""FastAPI routes for delivery tracking.

Drivers post their positions for the order they are delivering; the customer
who placed the order (and admins) read the history and the route.
"""

from fastapi import APIRouter, Depends, HTTPException

from ordering.order.store import OrderStore
from shared.auth import Principal, current_principal, require_driver
from tracking.api.schemas import (
    DeliveryStatusResponse,
    LocationRecordedResponse,
    LocationSampleRequest,
    PointSchema,
    RouteResponse,
)
from tracking.location.store import LocationStore
from tracking.viewer.subscriber import DeliveryTrackingSubscriber

delivery_router = APIRouter(prefix="/deliveries", tags=["deliveries"])


def _visible_order(order_id: str, principal: Principal) -> dict:
    order = OrderStore().get(order_id)
    if not principal.capabilities.is_admin and principal.user_id not in {order["customer_id"], order["driver_id"]}:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return order


def _assigned_order(order_id: str, principal: Principal) -> dict:
    require_driver(principal)
    order = OrderStore().get(order_id)
    if order["driver_id"] != principal.user_id:
        raise HTTPException(status_code=403, detail="Order is not assigned to you")
    return order


@delivery_router.post("/{order_id}/start", response_model=DeliveryStatusResponse)
async def start_delivery(order_id: str, principal: Principal = Depends(current_principal)) -> DeliveryStatusResponse:
    require_driver(principal)
    OrderStore().start_delivery(order_id, principal.user_id)
    return DeliveryStatusResponse(order_id=order_id)


@delivery_router.post("/{order_id}/complete", response_model=DeliveryStatusResponse)
async def complete_delivery(
    order_id: str, principal: Principal = Depends(current_principal)
) -> DeliveryStatusResponse:
    require_driver(principal)
    OrderStore().complete_delivery(order_id, principal.user_id)
    return DeliveryStatusResponse(order_id=order_id)


@delivery_router.post("/{order_id}/locations", status_code=201, response_model=LocationRecordedResponse)
async def record_location(
    order_id: str, body: LocationSampleRequest, principal: Principal = Depends(current_principal)
) -> LocationRecordedResponse:
    _assigned_order(order_id, principal)
    sample_id = LocationStore().insert(order_id=order_id, driver_id=principal.user_id, **body.model_dump())
    return LocationRecordedResponse(sample_id=sample_id)


@delivery_router.get("/{order_id}/locations")
async def location_history(order_id: str, principal: Principal = Depends(current_principal)) -> list[dict]:
    _visible_order(order_id, principal)
    return [position.to_dict() for position in LocationStore().history(order_id)]


@delivery_router.get("/{order_id}/route", response_model=RouteResponse)
async def delivery_route(order_id: str, principal: Principal = Depends(current_principal)) -> RouteResponse:
    _visible_order(order_id, principal)
    with DeliveryTrackingSubscriber(order_id) as viewer:
        return RouteResponse(
            order_id=order_id,
            waiting_for_driver=viewer.waiting_for_driver,
            current_position=viewer.current_position.to_dict() if viewer.current_position else None,
            route=[PointSchema(**point.to_dict()) for point in viewer.route()],
        )
