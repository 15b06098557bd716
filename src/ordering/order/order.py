"""Order aggregate (CQRS): the persistent record of a placed order.

Status fields are updated unconditionally by three actors: checkout (payment
confirmation), admins (status and driver assignment) and drivers (start and
complete delivery). Orders are never deleted.

Order status:
    PENDING → PROCESSING (driver assigned) → SHIPPED (delivery started) → DELIVERED
    PROCESSING → PENDING (driver unassigned)
    admins may set any status, including CANCELLED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from ordering.domain import ordering
from ordering.order.events import (
    DriverAssigned,
    DriverUnassigned,
    OrderPlaced,
    OrderStatusChanged,
    PaymentStatusChanged,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


# Orders a driver may still work on
DELIVERABLE_STATES = {OrderStatus.PROCESSING, OrderStatus.SHIPPED}

# Orders that can no longer be handed to a driver
_CLOSED_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A line item with its price snapshotted at checkout."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    selected_variant = String(max_length=255)
    image = String(max_length=1000)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "selected_variant": self.selected_variant,
            "image": self.image,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    customer_id = Identifier()
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=254)
    customer_phone = String(required=True, max_length=50)
    shipping_address = Text(required=True)
    items = HasMany(OrderItem)
    total_amount = Float(required=True, min_value=0.0)
    payment_method = String(max_length=50)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    order_status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    transaction_id = String(max_length=255)
    payment_proof_url = String(max_length=1000)
    driver_id = Identifier()
    assigned_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["Order must contain at least one item"]})

    @invariant.post
    def total_must_match_items(self):
        expected = round(sum(item.price * item.quantity for item in self.items), 2)
        if round(self.total_amount or 0.0, 2) != expected:
            raise ValidationError({"total_amount": ["Total amount must equal the sum of line items"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        customer_name,
        customer_email,
        customer_phone,
        shipping_address,
        items_data,
        payment_method,
        customer_id=None,
        payment_status=PaymentStatus.PENDING.value,
        transaction_id=None,
        payment_proof_url=None,
    ):
        """Place an order from a snapshot of cart lines.

        Args:
            items_data: List of dicts with product_id, name, price, quantity,
                        and optionally selected_variant and image.
        """
        if not items_data:
            raise ValidationError({"items": ["Order must contain at least one item"]})

        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=item["product_id"],
                name=item["name"],
                price=float(item["price"]),
                quantity=int(item["quantity"]),
                selected_variant=item.get("selected_variant"),
                image=item.get("image"),
            )
            for item in items_data
        ]
        total_amount = round(sum(item.price * item.quantity for item in items), 2)

        order = cls(
            customer_id=customer_id,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            shipping_address=shipping_address,
            items=items,
            total_amount=total_amount,
            payment_method=payment_method,
            payment_status=payment_status,
            order_status=OrderStatus.PENDING.value,
            transaction_id=transaction_id,
            payment_proof_url=payment_proof_url,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id) if customer_id else None,
                customer_email=customer_email,
                items=json.dumps([item.to_dict() for item in items]),
                total_amount=total_amount,
                payment_method=payment_method,
                payment_status=payment_status,
                transaction_id=transaction_id,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _change_status(self, new_status: OrderStatus, now: datetime) -> None:
        previous = OrderStatus(self.order_status)
        if previous == new_status:
            return
        self.order_status = new_status.value
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous.value,
                new_status=new_status.value,
                customer_name=self.customer_name,
                customer_email=self.customer_email,
                total_amount=self.total_amount,
                items=json.dumps([item.to_dict() for item in self.items]),
                changed_at=now,
            )
        )

    def _assert_assigned_to(self, driver_id) -> None:
        if not self.driver_id or str(self.driver_id) != str(driver_id):
            raise ValidationError({"driver_id": ["Order is not assigned to this driver"]})

    # -------------------------------------------------------------------
    # Admin operations
    # -------------------------------------------------------------------
    def assign_driver(self, driver_id=None):
        """Assign a driver, or unassign with an empty ``driver_id``.

        Assigning forces PROCESSING and stamps ``assigned_at``; unassigning
        clears both and forces PENDING.
        """
        if OrderStatus(self.order_status) in _CLOSED_STATES:
            raise ValidationError(
                {"order_status": [f"Cannot change the driver of a {self.order_status} order"]}
            )

        now = datetime.now(UTC)
        previous_driver_id = str(self.driver_id) if self.driver_id else None

        if driver_id:
            self.driver_id = driver_id
            self.assigned_at = now
            self.updated_at = now
            self._change_status(OrderStatus.PROCESSING, now)
            self.raise_(
                DriverAssigned(
                    order_id=str(self.id),
                    driver_id=str(driver_id),
                    previous_driver_id=previous_driver_id,
                    assigned_at=now,
                )
            )
        else:
            self.driver_id = None
            self.assigned_at = None
            self.updated_at = now
            self._change_status(OrderStatus.PENDING, now)
            if previous_driver_id:
                self.raise_(
                    DriverUnassigned(
                        order_id=str(self.id),
                        previous_driver_id=previous_driver_id,
                        unassigned_at=now,
                    )
                )

    def update_status(self, order_status):
        """Set the order status unconditionally."""
        now = datetime.now(UTC)
        self.updated_at = now
        self._change_status(OrderStatus(order_status), now)

    def set_payment_status(self, payment_status):
        previous = PaymentStatus(self.payment_status)
        target = PaymentStatus(payment_status)
        now = datetime.now(UTC)
        self.updated_at = now
        if previous == target:
            return

        self.payment_status = target.value
        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                previous_status=previous.value,
                new_status=target.value,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Driver operations
    # -------------------------------------------------------------------
    def start_delivery(self, driver_id):
        """The assigned driver leaves the store with the order."""
        self._assert_assigned_to(driver_id)
        if OrderStatus(self.order_status) not in DELIVERABLE_STATES:
            raise ValidationError({"order_status": [f"Cannot start delivery of a {self.order_status} order"]})

        now = datetime.now(UTC)
        self.updated_at = now
        self._change_status(OrderStatus.SHIPPED, now)

    def complete_delivery(self, driver_id):
        self._assert_assigned_to(driver_id)
        if OrderStatus(self.order_status) not in DELIVERABLE_STATES:
            raise ValidationError({"order_status": [f"Cannot complete delivery of a {self.order_status} order"]})

        now = datetime.now(UTC)
        self.updated_at = now
        self._change_status(OrderStatus.DELIVERED, now)

    # -------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "customer_id": str(self.customer_id) if self.customer_id else None,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "shipping_address": self.shipping_address,
            "items": [item.to_dict() for item in self.items],
            "total_amount": self.total_amount,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "order_status": self.order_status,
            "transaction_id": self.transaction_id,
            "payment_proof_url": self.payment_proof_url,
            "driver_id": str(self.driver_id) if self.driver_id else None,
            "assigned_at": self.assigned_at.isoformat() if self.assigned_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_public_dict(self) -> dict:
        """Status view for the public order lookup; carries no contact details."""
        return {
            "id": str(self.id),
            "order_status": self.order_status,
            "payment_status": self.payment_status,
            "total_amount": self.total_amount,
            "items": [
                {"name": item.name, "quantity": item.quantity, "selected_variant": item.selected_variant}
                for item in self.items
            ],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
