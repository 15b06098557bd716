"""Tracking domain API package."""

from tracking.api.routes import delivery_router

__all__ = ["delivery_router"]
