"""Domain events for the Order aggregate.

All events are versioned, immutable facts. Status changes feed the customer
status e-mails; the rest are kept for audit and downstream consumers.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A paid (or proof-backed) checkout produced a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier()
    customer_email = String(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    total_amount = Float(required=True)
    payment_method = String()
    payment_status = String(required=True)
    transaction_id = String()
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a different fulfilment status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    customer_name = String()
    customer_email = String()
    total_amount = Float()
    items = Text()  # JSON: list of item dicts
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class DriverAssigned:
    __version__ = 1

    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    previous_driver_id = Identifier()
    assigned_at = DateTime(required=True)


@ordering.event(part_of="Order")
class DriverUnassigned:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_driver_id = Identifier(required=True)
    unassigned_at = DateTime(required=True)
