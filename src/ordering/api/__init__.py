"""Ordering domain API package."""

from ordering.api.routes import checkout_router, driver_router, order_router

__all__ = ["checkout_router", "order_router", "driver_router"]
