"""Integration tests for the checkout endpoints via TestClient."""

import functools
import time

import pytest
from ordering.checkout.orchestrator import CheckoutOrchestrator
from ordering.order.order import Order
from ordering.order.store import OrderStore
from protean import current_domain

CUSTOMER = {"x-user-id": "cust-001", "x-user-email": "asha@example.com"}
OTHER_CUSTOMER = {"x-user-id": "cust-002", "x-user-email": "juma@example.com"}


@pytest.fixture(autouse=True)
def fast_polling(monkeypatch):
    monkeypatch.setattr(
        "ordering.api.routes.CheckoutOrchestrator",
        functools.partial(CheckoutOrchestrator, poll_interval=0, max_poll_attempts=3),
    )


@pytest.fixture
def checkout_id(client, items, gateway):
    response = client.post("/checkout", json={"items": items}, headers=CUSTOMER)
    assert response.status_code == 201
    return response.json()["checkout_id"]


def _wait_for(client, checkout_id, *states):
    for _ in range(200):
        body = client.get(f"/checkout/{checkout_id}", headers=CUSTOMER).json()
        if body["state"] in states:
            return body
        time.sleep(0.01)
    raise AssertionError(f"checkout never reached {states}: {body}")


class TestCheckoutEndpoints:
    def test_open_checkout_reports_cart(self, client, checkout_id):
        body = client.get(f"/checkout/{checkout_id}", headers=CUSTOMER).json()
        assert body["state"] == "open"
        assert body["cart_total"] == 25000.0
        assert body["cart_items"] == 3
        assert body["payment"]["status"] == "idle"

    def test_checkout_is_private(self, client, checkout_id):
        assert client.get(f"/checkout/{checkout_id}", headers=OTHER_CUSTOMER).status_code == 404

    def test_verify_phone_returns_methods(self, client, checkout_id):
        response = client.post(f"/checkout/{checkout_id}/verify-phone", json={"phone": "0712345678"}, headers=CUSTOMER)
        assert response.status_code == 200
        body = response.json()
        assert body["order_reference"].startswith("ORD")
        assert body["methods"][0]["name"] == "Mpesa"

    def test_no_available_method_is_payment_error(self, client, checkout_id, gateway):
        gateway.set_methods([{"name": "Mpesa", "status": "UNAVAILABLE", "message": "insufficient limit"}])
        response = client.post(f"/checkout/{checkout_id}/verify-phone", json={"phone": "0712345678"}, headers=CUSTOMER)
        assert response.status_code == 402
        assert response.json() == {
            "error": "NoAvailableMethodError",
            "detail": "insufficient limit",
            "recoverable": True,
        }

    def test_pay_without_verification_refused(self, client, checkout_id, customer, gateway):
        response = client.post(f"/checkout/{checkout_id}/pay", json={"customer": customer}, headers=CUSTOMER)
        assert response.status_code == 402
        assert response.json()["detail"] == "Please verify your phone number before paying."
        assert gateway.calls_to("initiate") == []

    def test_full_checkout(self, client, checkout_id, customer, gateway):
        gateway.transaction_id = "TX-API"
        client.post(f"/checkout/{checkout_id}/verify-phone", json={"phone": "0712345678"}, headers=CUSTOMER)

        response = client.post(f"/checkout/{checkout_id}/pay", json={"customer": customer}, headers=CUSTOMER)
        assert response.status_code == 202
        assert response.json()["transaction_id"] == "TX-API"

        body = _wait_for(client, checkout_id, "completed", "failed")
        assert body["state"] == "completed"
        assert body["cart_items"] == 0
        order = current_domain.repository_for(Order).get(body["order_id"])
        assert order.payment_status == "confirmed"

    def test_declined_payment_reported_on_checkout(self, client, checkout_id, customer, gateway):
        gateway.script_statuses("FAILED")
        client.post(f"/checkout/{checkout_id}/verify-phone", json={"phone": "0712345678"}, headers=CUSTOMER)
        client.post(f"/checkout/{checkout_id}/pay", json={"customer": customer}, headers=CUSTOMER)

        body = _wait_for(client, checkout_id, "failed", "completed")
        assert body["state"] == "failed"
        assert body["transaction_id"] is not None
        assert body["error"] == "Payment was declined or failed"
        assert body["cart_items"] == 3

    def test_order_failure_after_payment_reported_distinctly(self, client, checkout_id, customer, gateway, monkeypatch):
        def _refuse(self, **kwargs):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(OrderStore, "place_order", _refuse)
        gateway.transaction_id = "TX-PAID"
        client.post(f"/checkout/{checkout_id}/verify-phone", json={"phone": "0712345678"}, headers=CUSTOMER)
        client.post(f"/checkout/{checkout_id}/pay", json={"customer": customer}, headers=CUSTOMER)

        body = _wait_for(client, checkout_id, "payment_received_order_failed", "failed", "completed")
        assert body["state"] == "payment_received_order_failed"
        assert body["order_reference"].startswith("ORD")
        assert body["transaction_id"] == "TX-PAID"
        assert body["order_reference"] in body["error"]
        assert body["cart_items"] == 3

    def test_cancel_checkout(self, client, checkout_id):
        assert client.delete(f"/checkout/{checkout_id}", headers=CUSTOMER).status_code == 200
        assert client.get(f"/checkout/{checkout_id}", headers=CUSTOMER).status_code == 404
