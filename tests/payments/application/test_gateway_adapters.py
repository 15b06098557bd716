"""Tests for gateway port/adapter integration."""

from unittest.mock import MagicMock

import pytest
import requests
from payments.errors import ConfigurationError, TransportError
from payments.gateway import get_gateway, reset_gateway, set_gateway
from payments.gateway.clickpesa_adapter import ClickPesaGateway, format_amount
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import GatewayResponse


def _response(payload, ok=True, status_code=200):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.json.return_value = payload
    response.text = str(payload)
    return response


def _clickpesa(payload, ok=True, status_code=200):
    http = MagicMock()
    http.post.return_value = _response({"success": True, "token": "Bearer abc"})
    http.request.return_value = _response(payload, ok=ok, status_code=status_code)
    return ClickPesaGateway(client_id="client", api_key="key", base_url="https://pay.test", session=http), http


class TestFakeGateway:
    def test_default_preview_has_available_method(self):
        result = FakeGateway().preview("255712345678", 1000, "REF1")
        assert isinstance(result, GatewayResponse)
        assert result.success is True
        assert result.data["activeMethods"][0]["status"] == "AVAILABLE"

    def test_configured_failure(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False, failure_reason="Insufficient balance")
        result = gateway.initiate("255712345678", 1000, "REF1")
        assert result.success is False
        assert result.error == "Insufficient balance"

    def test_initiate_echoes_reference(self):
        gateway = FakeGateway()
        gateway.transaction_id = "TX1"
        result = gateway.initiate("255712345678", 1000, "REF1")
        assert result.data["id"] == "TX1"
        assert result.data["orderReference"] == "REF1"

    def test_scripted_statuses_then_final(self):
        gateway = FakeGateway()
        gateway.script_statuses("PROCESSING", then="SETTLED")
        assert gateway.status("REF1").data["status"] == "PROCESSING"
        assert gateway.status("REF1").data["status"] == "SETTLED"
        assert gateway.status("REF1").data["status"] == "SETTLED"

    def test_none_status_simulates_transport_failure(self):
        gateway = FakeGateway()
        gateway.script_statuses(None)
        with pytest.raises(TransportError):
            gateway.status("REF1")

    def test_call_logging(self):
        gateway = FakeGateway()
        gateway.preview("255712345678", 1000, "REF1")
        gateway.status("REF1")
        assert [call["method"] for call in gateway.calls] == ["preview", "status"]
        assert gateway.calls_to("preview")[0]["amount"] == 1000

    def test_reset_clears_calls_and_script(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False)
        gateway.preview("255712345678", 1000, "REF1")
        gateway.reset()
        assert gateway.calls == []
        assert gateway.should_succeed is True


class TestClickPesaGateway:
    def test_preview_posts_payment_body_with_sender_details(self):
        gateway, http = _clickpesa({"activeMethods": [{"name": "Mpesa", "status": "AVAILABLE"}]})
        result = gateway.preview("255712345678", 25000, "REF1")

        assert result.success is True
        method, url = http.request.call_args.args
        assert method == "POST"
        assert url == "https://pay.test/third-parties/payments/preview-ussd-push-request"
        body = http.request.call_args.kwargs["json"]
        assert body == {
            "amount": "25000",
            "currency": "TZS",
            "orderReference": "REF1",
            "phoneNumber": "255712345678",
            "fetchSenderDetails": True,
        }
        assert http.request.call_args.kwargs["headers"]["Authorization"] == "Bearer abc"

    def test_initiate_omits_sender_details(self):
        gateway, http = _clickpesa({"id": "TX1", "status": "PROCESSING"})
        result = gateway.initiate("255712345678", 25000, "REF1")
        assert result.data["id"] == "TX1"
        assert "fetchSenderDetails" not in http.request.call_args.kwargs["json"]

    def test_token_generated_per_call(self):
        gateway, http = _clickpesa({"status": "PROCESSING"})
        gateway.status("REF1")
        gateway.status("REF1")
        assert http.post.call_count == 2
        headers = http.post.call_args.kwargs["headers"]
        assert headers["client-id"] == "client"
        assert headers["api-key"] == "key"

    def test_status_uses_get_and_unwraps_list(self):
        gateway, http = _clickpesa([{"status": "SETTLED", "orderReference": "REF1"}])
        result = gateway.status("REF1")
        method, url = http.request.call_args.args
        assert method == "GET"
        assert url.endswith("/third-parties/payments/status/REF1")
        assert result.data["status"] == "SETTLED"

    def test_error_response_carries_gateway_message(self):
        gateway, _ = _clickpesa({"message": "Invalid phone number"}, ok=False, status_code=400)
        result = gateway.preview("255712345678", 25000, "REF1")
        assert result.success is False
        assert result.error == "Invalid phone number"

    def test_error_response_without_message_uses_generic_text(self):
        gateway, _ = _clickpesa({}, ok=False, status_code=500)
        assert gateway.initiate("255712345678", 25000, "REF1").error == "Payment request failed"

    def test_network_failure_becomes_transport_error(self):
        gateway, http = _clickpesa({})
        http.request.side_effect = requests.ConnectionError("boom")
        with pytest.raises(TransportError):
            gateway.status("REF1")

    def test_invalid_json_becomes_transport_error(self):
        gateway, http = _clickpesa({})
        http.request.return_value.json.side_effect = ValueError("not json")
        with pytest.raises(TransportError):
            gateway.status("REF1")

    def test_missing_credentials_is_configuration_error(self):
        http = MagicMock()
        gateway = ClickPesaGateway(client_id="", api_key="", session=http)
        with pytest.raises(ConfigurationError):
            gateway.preview("255712345678", 25000, "REF1")
        http.request.assert_not_called()

    def test_rejected_token_is_transport_error(self):
        gateway, http = _clickpesa({})
        http.post.return_value = _response({"success": False}, ok=False, status_code=401)
        with pytest.raises(TransportError):
            gateway.status("REF1")

    def test_format_amount(self):
        assert format_amount(25000) == "25000"
        assert format_amount(25000.0) == "25000"
        assert format_amount(1500.5) == "1500.5"


class TestGatewayFactory:
    def test_get_gateway_returns_fake_by_default(self, monkeypatch):
        monkeypatch.delenv("PAYMENT_GATEWAY", raising=False)
        reset_gateway()
        assert isinstance(get_gateway(), FakeGateway)
        reset_gateway()

    def test_clickpesa_selected_by_environment(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_GATEWAY", "clickpesa")
        reset_gateway()
        assert isinstance(get_gateway(), ClickPesaGateway)
        reset_gateway()

    def test_set_gateway_overrides(self):
        custom = FakeGateway()
        set_gateway(custom)
        assert get_gateway() is custom
        reset_gateway()

    def test_get_gateway_is_singleton(self):
        reset_gateway()
        assert get_gateway() is get_gateway()
        reset_gateway()
