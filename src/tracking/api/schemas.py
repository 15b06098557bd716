"""Pydantic request/response schemas for the Tracking API."""

from datetime import datetime

from pydantic import BaseModel, Field


class LocationSampleRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: float | None = Field(default=None, ge=0)
    heading: float | None = None
    speed: float | None = None
    captured_at: datetime | None = None


class LocationRecordedResponse(BaseModel):
    sample_id: str


class PointSchema(BaseModel):
    lat: float
    lng: float


class RouteResponse(BaseModel):
    order_id: str
    waiting_for_driver: bool
    current_position: dict | None = None
    route: list[PointSchema]


class DeliveryStatusResponse(BaseModel):
    status: str = "ok"
    order_id: str
