"""Tracking bounded context: delivery driver positions.

Drivers append location samples against the order they are delivering;
customers follow the reconstructed route of their own order.
"""

import structlog
from protean.domain import Domain

from shared.logging import configure_logging

configure_logging()

tracking = Domain(name="tracking")

logger = structlog.get_logger(__name__)
