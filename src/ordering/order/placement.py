"""Order placement: commands and handler.

Both commands carry the authenticated account's e-mail. The contact e-mail
on the order must match it; a mismatch is rejected, never corrected.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, PaymentStatus

logger = structlog.get_logger(__name__)

MOBILE_MONEY = "mobile_money"


def assert_email_matches(account_email, customer_email):
    if (account_email or "").strip().lower() != (customer_email or "").strip().lower():
        raise ValidationError({"customer_email": ["Email must match your account email"]})


def _items(raw):
    return json.loads(raw) if isinstance(raw, str) else raw


@ordering.command(part_of="Order")
class PlaceOrder:
    """Record an order whose mobile-money payment has settled."""

    customer_id = Identifier()
    account_email = String(required=True, max_length=254)
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=254)
    customer_phone = String(required=True, max_length=50)
    shipping_address = Text(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    payment_method = String(max_length=50, default=MOBILE_MONEY)
    transaction_id = String(required=True, max_length=255)


@ordering.command(part_of="Order")
class PlaceManualPaymentOrder:
    """Record an order paid outside the gateway, pending admin verification."""

    customer_id = Identifier()
    account_email = String(required=True, max_length=254)
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=254)
    customer_phone = String(required=True, max_length=50)
    shipping_address = Text(required=True)
    items = Text(required=True)  # JSON: list of item dicts
    payment_method = String(required=True, max_length=50)
    transaction_id = String(max_length=255)
    payment_proof_url = String(max_length=1000)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        assert_email_matches(command.account_email, command.customer_email)

        order = Order.create(
            customer_id=command.customer_id,
            customer_name=command.customer_name,
            customer_email=command.customer_email.strip(),
            customer_phone=command.customer_phone,
            shipping_address=command.shipping_address,
            items_data=_items(command.items),
            payment_method=command.payment_method or MOBILE_MONEY,
            payment_status=PaymentStatus.CONFIRMED.value,
            transaction_id=command.transaction_id,
        )
        current_domain.repository_for(Order).add(order)
        logger.info("order_placed", order_id=str(order.id), transaction_id=command.transaction_id)
        return str(order.id)

    @handle(PlaceManualPaymentOrder)
    def place_manual_payment_order(self, command):
        assert_email_matches(command.account_email, command.customer_email)

        transaction_id = (command.transaction_id or "").strip() or None
        if not transaction_id and not command.payment_proof_url:
            raise ValidationError(
                {"payment_proof": ["Provide the mobile money transaction ID or upload a payment screenshot"]}
            )

        order = Order.create(
            customer_id=command.customer_id,
            customer_name=command.customer_name,
            customer_email=command.customer_email.strip(),
            customer_phone=command.customer_phone,
            shipping_address=command.shipping_address,
            items_data=_items(command.items),
            payment_method=command.payment_method,
            payment_status=PaymentStatus.PENDING.value,
            transaction_id=transaction_id,
            payment_proof_url=command.payment_proof_url,
        )
        current_domain.repository_for(Order).add(order)
        logger.info("manual_payment_order_placed", order_id=str(order.id))
        return str(order.id)
