"""Scriptable fake mobile-money gateway for development and testing.

No external calls are made. Tests script the methods a preview reports, the
outcome of initiate, and the sequence of statuses the poll will observe.
"""

from collections import deque
from datetime import UTC, datetime
from uuid import uuid4

from payments.errors import TransportError
from payments.gateway.port import GatewayResponse, MobileMoneyGateway


class FakeGateway(MobileMoneyGateway):
    """Configurable fake mobile-money gateway."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.reset()

    def reset(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment request failed"
        self.methods: list[dict] = [{"name": "Mpesa", "status": "AVAILABLE", "fee": 0}]
        self.sender: dict | None = None
        self.transaction_id: str | None = None
        self.final_status: str = "SUCCESS"
        self.unreachable: bool = False
        self._statuses: deque = deque()
        self.calls.clear()

    def configure(self, should_succeed: bool, failure_reason: str = "Payment request failed") -> None:
        """Make preview and initiate succeed or fail."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def set_methods(self, methods: list[dict], sender: dict | None = None) -> None:
        self.methods = list(methods)
        self.sender = sender

    def script_statuses(self, *statuses: str | None, then: str | None = None) -> None:
        """Queue the statuses returned by successive status calls.

        ``None`` in the queue simulates a transport failure on that poll.
        Once the queue is drained, ``then`` (default: the final status) is
        returned forever.
        """
        self._statuses = deque(statuses)
        if then is not None:
            self.final_status = then

    def _record(self, method: str, **kwargs) -> None:
        self.calls.append({"method": method, **kwargs})

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def preview(self, phone_number: str, amount: float, order_reference: str) -> GatewayResponse:
        self._record("preview", phone_number=phone_number, amount=amount, order_reference=order_reference)
        if self.unreachable:
            raise TransportError("Could not reach the payment service. Please try again.")
        if not self.should_succeed:
            return GatewayResponse(success=False, error=self.failure_reason)

        data = {"activeMethods": list(self.methods)}
        if self.sender is not None:
            data["sender"] = dict(self.sender)
        return GatewayResponse(success=True, data=data)

    def initiate(self, phone_number: str, amount: float, order_reference: str) -> GatewayResponse:
        self._record("initiate", phone_number=phone_number, amount=amount, order_reference=order_reference)
        if self.unreachable:
            raise TransportError("Could not reach the payment service. Please try again.")
        if not self.should_succeed:
            return GatewayResponse(success=False, error=self.failure_reason)

        return GatewayResponse(
            success=True,
            data={
                "id": self.transaction_id or f"fake_txn_{uuid4().hex[:12]}",
                "status": "PROCESSING",
                "channel": self.methods[0]["name"] if self.methods else "",
                "orderReference": order_reference,
                "collectedAmount": str(amount),
                "collectedCurrency": "TZS",
                "createdAt": datetime.now(UTC).isoformat(),
            },
        )

    def status(self, order_reference: str) -> GatewayResponse:
        self._record("status", order_reference=order_reference)
        current = self._statuses.popleft() if self._statuses else self.final_status
        if current is None:
            raise TransportError("Could not reach the payment service. Please try again.")
        return GatewayResponse(success=True, data={"status": current, "orderReference": order_reference})
