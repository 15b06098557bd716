"""ClickPesa USSD-push gateway adapter.

A bearer token is generated for every call from the client id and API key.
Amounts travel as decimal strings in TZS.
"""

import os

import requests
import structlog

from payments.errors import ConfigurationError, TransportError
from payments.gateway.port import GatewayResponse, MobileMoneyGateway

logger = structlog.get_logger(__name__)

CLICKPESA_BASE_URL = "https://api.clickpesa.com"
CURRENCY = "TZS"
REQUEST_TIMEOUT_SECONDS = 30

PREVIEW_PATH = "/third-parties/payments/preview-ussd-push-request"
INITIATE_PATH = "/third-parties/payments/initiate-ussd-push-request"
STATUS_PATH = "/third-parties/payments/status/{order_reference}"


def format_amount(amount: float) -> str:
    amount = float(amount)
    return str(int(amount)) if amount.is_integer() else str(amount)


class ClickPesaGateway(MobileMoneyGateway):
    """Production ClickPesa adapter."""

    def __init__(
        self,
        client_id: str | None = None,
        api_key: str | None = None,
        base_url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.client_id = client_id if client_id is not None else os.getenv("CLICKPESA_CLIENT_ID", "")
        self.api_key = api_key if api_key is not None else os.getenv("CLICKPESA_API_KEY", "")
        self.base_url = (base_url or os.getenv("CLICKPESA_BASE_URL") or CLICKPESA_BASE_URL).rstrip("/")
        self.http = session or requests.Session()

    def _generate_token(self) -> str:
        if not self.client_id or not self.api_key:
            logger.error("clickpesa_credentials_missing")
            raise ConfigurationError()

        response = self.http.post(
            f"{self.base_url}/generate-token",
            headers={
                "client-id": self.client_id,
                "api-key": self.api_key,
                "Content-Type": "application/json",
            },
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        if not response.ok:
            logger.error("clickpesa_token_failed", status_code=response.status_code, body=response.text)
            raise TransportError()

        data = response.json()
        if not data.get("success") or not data.get("token"):
            logger.error("clickpesa_token_invalid")
            raise TransportError()
        return data["token"]

    def _call(self, method: str, path: str, body: dict | None = None) -> GatewayResponse:
        try:
            token = self._generate_token()
            response = self.http.request(
                method,
                f"{self.base_url}{path}",
                headers={"Authorization": token, "Content-Type": "application/json"},
                json=body,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            data = response.json()
        except requests.RequestException as exc:
            logger.warning("clickpesa_transport_error", path=path, error=str(exc))
            raise TransportError() from exc
        except ValueError as exc:
            logger.warning("clickpesa_invalid_response", path=path, error=str(exc))
            raise TransportError() from exc

        logger.info("clickpesa_response", path=path, status_code=response.status_code)

        if not response.ok:
            message = data.get("message") if isinstance(data, dict) else None
            return GatewayResponse(success=False, data={"details": data}, error=message or "Payment request failed")

        if isinstance(data, list):
            data = data[0] if data else {}
        return GatewayResponse(success=True, data=data)

    def _payment_body(self, phone_number: str, amount: float, order_reference: str) -> dict:
        return {
            "amount": format_amount(amount),
            "currency": CURRENCY,
            "orderReference": order_reference,
            "phoneNumber": phone_number,
        }

    def preview(self, phone_number: str, amount: float, order_reference: str) -> GatewayResponse:
        body = self._payment_body(phone_number, amount, order_reference)
        body["fetchSenderDetails"] = True
        return self._call("POST", PREVIEW_PATH, body)

    def initiate(self, phone_number: str, amount: float, order_reference: str) -> GatewayResponse:
        return self._call("POST", INITIATE_PATH, self._payment_body(phone_number, amount, order_reference))

    def status(self, order_reference: str) -> GatewayResponse:
        return self._call("GET", STATUS_PATH.format(order_reference=order_reference))
