"""Ordering bounded context: orders, carts and the mobile-money checkout.

Orders are placed once a payment settles (or a manual payment proof is
submitted), then moved through fulfilment by admins and delivery drivers.
"""

import structlog
from protean.domain import Domain

from shared.logging import configure_logging

configure_logging()

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
