"""Application tests for admin and driver commands on a placed order."""

import pytest
from ordering.order.assignment import AssignDriver
from ordering.order.delivery import CompleteDelivery, StartDelivery
from ordering.order.order import Order, OrderStatus, PaymentStatus
from ordering.order.status import UpdateOrderStatus, UpdatePaymentStatus
from ordering.order.store import OrderStore
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


@pytest.fixture
def order_id(customer, items):
    return OrderStore().place_manual_payment_order(
        account_email=customer["email"],
        customer=customer,
        items=items,
        payment_method="mpesa",
        transaction_id="MP240101ABC",
        customer_id="cust-001",
    )


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


def _process(command):
    return current_domain.process(command, asynchronous=False)


class TestAssignDriverCommand:
    def test_assign(self, order_id):
        _process(AssignDriver(order_id=order_id, driver_id="drv-001"))
        order = _order(order_id)
        assert str(order.driver_id) == "drv-001"
        assert order.order_status == OrderStatus.PROCESSING.value

    def test_unassign(self, order_id):
        _process(AssignDriver(order_id=order_id, driver_id="drv-001"))
        _process(AssignDriver(order_id=order_id))
        order = _order(order_id)
        assert order.driver_id is None
        assert order.order_status == OrderStatus.PENDING.value

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            _process(AssignDriver(order_id="missing", driver_id="drv-001"))


class TestStatusCommands:
    def test_update_order_status(self, order_id):
        _process(UpdateOrderStatus(order_id=order_id, order_status="cancelled"))
        assert _order(order_id).order_status == OrderStatus.CANCELLED.value

    def test_invalid_order_status_rejected(self, order_id):
        with pytest.raises(ValidationError):
            UpdateOrderStatus(order_id=order_id, order_status="lost")

    def test_update_payment_status(self, order_id):
        _process(UpdatePaymentStatus(order_id=order_id, payment_status="confirmed"))
        assert _order(order_id).payment_status == PaymentStatus.CONFIRMED.value

    def test_last_writer_wins(self, order_id):
        _process(UpdateOrderStatus(order_id=order_id, order_status="shipped"))
        _process(UpdateOrderStatus(order_id=order_id, order_status="processing"))
        assert _order(order_id).order_status == OrderStatus.PROCESSING.value


class TestDeliveryCommands:
    def test_driver_delivers(self, order_id):
        _process(AssignDriver(order_id=order_id, driver_id="drv-001"))
        _process(StartDelivery(order_id=order_id, driver_id="drv-001"))
        assert _order(order_id).order_status == OrderStatus.SHIPPED.value
        _process(CompleteDelivery(order_id=order_id, driver_id="drv-001"))
        assert _order(order_id).order_status == OrderStatus.DELIVERED.value

    def test_unassigned_driver_rejected(self, order_id):
        _process(AssignDriver(order_id=order_id, driver_id="drv-001"))
        with pytest.raises(ValidationError):
            _process(StartDelivery(order_id=order_id, driver_id="drv-002"))
        assert _order(order_id).order_status == OrderStatus.PROCESSING.value


class TestOrderStore:
    def test_get_returns_plain_dict(self, order_id):
        data = OrderStore().get(order_id)
        assert data["id"] == order_id
        assert data["customer_id"] == "cust-001"

    def test_facade_mutations(self, order_id):
        store = OrderStore()
        store.assign_driver(order_id, "drv-001")
        store.start_delivery(order_id, "drv-001")
        store.update_payment_status(order_id, "confirmed")
        data = store.get(order_id)
        assert data["order_status"] == "shipped"
        assert data["payment_status"] == "confirmed"
        store.update_status(order_id, "cancelled")
        assert store.get(order_id)["order_status"] == "cancelled"

    def test_place_order_confirms_payment(self, customer, items):
        store = OrderStore()
        order_id = store.place_order(
            account_email=customer["email"], customer=customer, items=items, transaction_id="ORDREF1"
        )
        assert store.get(order_id)["payment_status"] == "confirmed"
