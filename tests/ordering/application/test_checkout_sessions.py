"""Tests for the in-process checkout registry behind the HTTP API."""

import asyncio

import pytest
from ordering.cart.store import CartLine, CartStore
from ordering.checkout.orchestrator import CheckoutOrchestrator, CustomerDetails, OrderCreationError
from ordering.checkout.sessions import (
    ORDER_FAILED_AFTER_PAYMENT,
    CheckoutSessions,
    get_checkout_sessions,
    reset_checkout_sessions,
)
from payments.client import PaymentGatewayClient
from protean.exceptions import ObjectNotFoundError
from shared.auth import Principal


async def _no_wait(_seconds):
    return None


@pytest.fixture
def orchestrator(items, gateway):
    cart = CartStore()
    for item in items:
        cart.add(CartLine(**item))
    return CheckoutOrchestrator(
        cart=cart,
        principal=Principal.establish("cust-001", "asha@example.com"),
        client=PaymentGatewayClient(gateway=gateway),
        max_poll_attempts=2,
        sleep=_no_wait,
    )


class TestCheckoutSessions:
    def test_open_entry_is_owned(self, orchestrator):
        sessions = CheckoutSessions()
        entry = sessions.open(orchestrator)
        assert entry.owner_id == "cust-001"
        assert entry.state == "open"
        assert sessions.get(entry.checkout_id, "cust-001") is entry

    def test_other_principal_cannot_see_entry(self, orchestrator):
        sessions = CheckoutSessions()
        entry = sessions.open(orchestrator)
        with pytest.raises(ObjectNotFoundError):
            sessions.get(entry.checkout_id, "cust-002")

    def test_close_removes_entry(self, orchestrator):
        sessions = CheckoutSessions()
        entry = sessions.open(orchestrator)
        sessions.close(entry.checkout_id, "cust-001")
        with pytest.raises(ObjectNotFoundError):
            sessions.get(entry.checkout_id, "cust-001")

    def test_background_finish_records_result(self, orchestrator, customer):
        sessions = CheckoutSessions()
        entry = sessions.open(orchestrator)

        async def _scenario():
            await orchestrator.verify_phone("0712345678")
            await orchestrator.start_payment(CustomerDetails(**customer))
            task = sessions.finish_in_background(entry)
            assert entry.state == "awaiting_payment"
            await task

        asyncio.run(_scenario())
        assert entry.state == "completed"
        assert entry.to_dict()["order_id"] == entry.result.order_id

    def test_background_finish_records_timeout(self, orchestrator, gateway, customer):
        gateway.script_statuses(then="PROCESSING")
        sessions = CheckoutSessions()
        entry = sessions.open(orchestrator)

        async def _scenario():
            await orchestrator.verify_phone("0712345678")
            await orchestrator.start_payment(CustomerDetails(**customer))
            await sessions.finish_in_background(entry)

        asyncio.run(_scenario())
        assert entry.state == "timed_out"
        assert "check your phone" in entry.to_dict()["error"]

    def test_registry_singleton(self):
        reset_checkout_sessions()
        assert get_checkout_sessions() is get_checkout_sessions()

    def test_order_failure_after_payment_has_its_own_state(self, orchestrator, customer):
        sessions = CheckoutSessions()
        entry = sessions.open(orchestrator)
        entry.error = OrderCreationError("ORDREF123", "TX-9")

        assert entry.state == ORDER_FAILED_AFTER_PAYMENT
        body = entry.to_dict()
        assert body["order_reference"] == "ORDREF123"
        assert body["transaction_id"] == "TX-9"
        assert "ORDREF123" in body["error"]


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestCheckoutEviction:
    def test_idle_entry_evicted_after_retention(self, orchestrator):
        clock = _Clock()
        sessions = CheckoutSessions(retention_seconds=60, clock=clock)
        entry = sessions.open(orchestrator)

        clock.now += 61
        assert sessions.evict_expired() == 1
        assert len(sessions) == 0
        with pytest.raises(ObjectNotFoundError):
            sessions.get(entry.checkout_id, "cust-001")

    def test_reading_an_entry_keeps_it_alive(self, orchestrator):
        clock = _Clock()
        sessions = CheckoutSessions(retention_seconds=60, clock=clock)
        entry = sessions.open(orchestrator)

        clock.now += 50
        sessions.get(entry.checkout_id, "cust-001")
        clock.now += 50
        assert sessions.get(entry.checkout_id, "cust-001") is entry

    def test_finished_entry_evicted_once_window_passes(self, orchestrator, customer):
        clock = _Clock()
        sessions = CheckoutSessions(retention_seconds=60, clock=clock)
        entry = sessions.open(orchestrator)

        async def _scenario():
            await orchestrator.verify_phone("0712345678")
            await orchestrator.start_payment(CustomerDetails(**customer))
            await sessions.finish_in_background(entry)

        asyncio.run(_scenario())
        assert entry.state == "completed"

        clock.now += 61
        sessions.open(orchestrator)
        assert len(sessions) == 1

    def test_running_finish_never_evicted(self, orchestrator):
        clock = _Clock()
        sessions = CheckoutSessions(retention_seconds=60, clock=clock)

        async def _scenario():
            entry = sessions.open(orchestrator)
            entry.finish_task = asyncio.create_task(asyncio.sleep(3600))
            clock.now += 600
            evicted = sessions.evict_expired()
            entry.finish_task.cancel()
            return evicted

        assert asyncio.run(_scenario()) == 0
        assert len(sessions) == 1
