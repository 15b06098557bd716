"""Order store facade for callers outside the ordering domain context.

The checkout orchestrator and the driver publisher run in asyncio tasks that
do not inherit a domain context, so every call pushes the ordering context
itself.
"""

import json

from ordering.domain import ordering
from ordering.order.assignment import AssignDriver
from ordering.order.delivery import CompleteDelivery, StartDelivery
from ordering.order.placement import PlaceManualPaymentOrder, PlaceOrder
from ordering.order.queries import get_order
from ordering.order.status import UpdateOrderStatus, UpdatePaymentStatus


class OrderStore:
    def place_order(self, *, account_email, customer, items, transaction_id, customer_id=None) -> str:
        """Create a confirmed order. Returns the new order id."""
        with ordering.domain_context():
            return ordering.process(
                PlaceOrder(
                    customer_id=customer_id,
                    account_email=account_email,
                    customer_name=customer["name"],
                    customer_email=customer["email"],
                    customer_phone=customer["phone"],
                    shipping_address=customer["shipping_address"],
                    items=json.dumps(items),
                    transaction_id=transaction_id,
                ),
                asynchronous=False,
            )

    def place_manual_payment_order(
        self,
        *,
        account_email,
        customer,
        items,
        payment_method,
        transaction_id=None,
        payment_proof_url=None,
        customer_id=None,
    ) -> str:
        """Create an order awaiting admin verification of the payment."""
        with ordering.domain_context():
            return ordering.process(
                PlaceManualPaymentOrder(
                    customer_id=customer_id,
                    account_email=account_email,
                    customer_name=customer["name"],
                    customer_email=customer["email"],
                    customer_phone=customer["phone"],
                    shipping_address=customer["shipping_address"],
                    items=json.dumps(items),
                    payment_method=payment_method,
                    transaction_id=transaction_id,
                    payment_proof_url=payment_proof_url,
                ),
                asynchronous=False,
            )

    def get(self, order_id) -> dict:
        with ordering.domain_context():
            return get_order(order_id).to_dict()

    def assign_driver(self, order_id, driver_id=None) -> None:
        with ordering.domain_context():
            ordering.process(AssignDriver(order_id=order_id, driver_id=driver_id), asynchronous=False)

    def update_status(self, order_id, order_status) -> None:
        with ordering.domain_context():
            ordering.process(UpdateOrderStatus(order_id=order_id, order_status=order_status), asynchronous=False)

    def update_payment_status(self, order_id, payment_status) -> None:
        with ordering.domain_context():
            ordering.process(
                UpdatePaymentStatus(order_id=order_id, payment_status=payment_status), asynchronous=False
            )

    def start_delivery(self, order_id, driver_id) -> None:
        with ordering.domain_context():
            ordering.process(StartDelivery(order_id=order_id, driver_id=driver_id), asynchronous=False)

    def complete_delivery(self, order_id, driver_id) -> None:
        with ordering.domain_context():
            ordering.process(CompleteDelivery(order_id=order_id, driver_id=driver_id), asynchronous=False)
