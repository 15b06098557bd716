"""Read-side helpers over the Order repository."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.order.order import DELIVERABLE_STATES, Order
from payments.phone import normalize_phone

MAX_RESULTS = 1000


def get_order(order_id) -> Order:
    """Raises ObjectNotFoundError when the order does not exist."""
    return current_domain.repository_for(Order).get(order_id)


def lookup_order(order_id, phone) -> dict:
    """Public order status lookup by order id and the phone used at checkout.

    Unknown ids and phone mismatches are indistinguishable to the caller.
    """
    try:
        order = get_order(order_id)
    except ObjectNotFoundError:
        order = None

    if order is None or normalize_phone(order.customer_phone) != normalize_phone(phone):
        raise ObjectNotFoundError("No order found with that ID and phone number")
    return order.to_public_dict()


def orders_for_driver(driver_id) -> list[Order]:
    """Orders assigned to the driver that are still to be delivered, oldest assignment first."""
    repo = current_domain.repository_for(Order)
    return (
        repo._dao.query.filter(
            driver_id=str(driver_id),
            order_status__in=[status.value for status in DELIVERABLE_STATES],
        )
        .order_by("assigned_at")
        .limit(MAX_RESULTS)
        .all()
        .items
    )


def orders_for_customer(customer_id) -> list[Order]:
    repo = current_domain.repository_for(Order)
    return (
        repo._dao.query.filter(customer_id=str(customer_id))
        .order_by("-created_at")
        .limit(MAX_RESULTS)
        .all()
        .items
    )
