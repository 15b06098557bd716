"""Payment gateway client: preview, initiate and status over a MobileMoneyGateway.

Gateway calls are blocking I/O and run in a worker thread so the event loop
stays free. Every failure is converted into the ``payments.errors`` taxonomy
before it leaves this module, and mirrored on the PaymentSession.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum

import structlog

from payments.errors import (
    GatewayRejected,
    NoAvailableMethodError,
    PaymentError,
    PreviewError,
)
from payments.gateway import get_gateway
from payments.gateway.port import MobileMoneyGateway
from payments.phone import is_valid_phone, normalize_phone
from payments.session import PaymentMethodOption, PaymentSession, PaymentStatus

logger = structlog.get_logger(__name__)

DECLINED_MESSAGE = "Payment was declined or failed"


class GatewayStatus(Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    PROCESSING = "PROCESSING"


_STATUS_MAP = {
    "SUCCESS": GatewayStatus.SUCCESS,
    "SETTLED": GatewayStatus.SUCCESS,
    "FAILED": GatewayStatus.FAILED,
    "PROCESSING": GatewayStatus.PROCESSING,
}


@dataclass(frozen=True)
class PreviewResult:
    methods: list[PaymentMethodOption] = field(default_factory=list)
    sender: dict | None = None

    @property
    def available_methods(self) -> list[PaymentMethodOption]:
        return [method for method in self.methods if method.available]


class PaymentGatewayClient:
    def __init__(self, gateway: MobileMoneyGateway | None = None, session: PaymentSession | None = None) -> None:
        self.gateway = gateway or get_gateway()
        self.session = session or PaymentSession()

    async def preview(self, phone: str, amount: float, order_reference: str) -> PreviewResult:
        """Ask the gateway which methods can collect from this number.

        Raises NoAvailableMethodError when none is AVAILABLE, GatewayRejected
        when the gateway reports a failure, TransportError/ConfigurationError
        as raised by the adapter. The session ends FAILED on every error.
        """
        self.session.begin_preview(order_reference)
        if not is_valid_phone(phone):
            error = PreviewError("Please enter a valid mobile money phone number.")
            self.session.fail(error.user_message)
            raise error

        phone_number = normalize_phone(phone)
        logger.info("payment_preview_requested", order_reference=order_reference, amount=amount)

        try:
            response = await asyncio.to_thread(self.gateway.preview, phone_number, amount, order_reference)
        except PaymentError as exc:
            self.session.fail(exc.user_message)
            raise

        if not response.success:
            error = GatewayRejected(response.error)
            self.session.fail(error.user_message)
            raise error

        methods = [PaymentMethodOption.from_gateway(raw) for raw in response.data.get("activeMethods") or []]
        sender = response.data.get("sender")
        if not any(method.available for method in methods):
            gateway_message = next((method.message for method in methods if method.message), None)
            error = NoAvailableMethodError(gateway_message)
            self.session.available_methods = methods
            self.session.fail(error.user_message)
            logger.info("payment_preview_no_method", order_reference=order_reference, message=gateway_message)
            raise error

        self.session.preview_succeeded(methods, sender)
        return PreviewResult(methods=methods, sender=sender)

    async def initiate(self, phone: str, amount: float, order_reference: str) -> str:
        """Trigger the USSD push. Returns the gateway transaction id.

        Refused with PaymentStateError unless the latest preview for
        ``order_reference`` found an AVAILABLE method.
        """
        self.session.begin_initiate(order_reference)
        phone_number = normalize_phone(phone)

        try:
            response = await asyncio.to_thread(self.gateway.initiate, phone_number, amount, order_reference)
        except PaymentError as exc:
            self.session.fail(exc.user_message)
            raise

        if not response.success:
            error = GatewayRejected(response.error)
            self.session.fail(error.user_message)
            raise error

        transaction_id = str(response.data.get("id") or order_reference)
        self.session.initiate_succeeded(transaction_id)
        logger.info("payment_initiated", order_reference=order_reference, transaction_id=transaction_id)
        return transaction_id

    async def status(self, order_reference: str) -> GatewayStatus | None:
        """Poll once. None means "unknown, try again"; it never aborts a payment."""
        try:
            response = await asyncio.to_thread(self.gateway.status, order_reference)
        except PaymentError as exc:
            logger.warning("payment_status_unavailable", order_reference=order_reference, error=str(exc))
            return None

        if not response.success:
            logger.warning("payment_status_unavailable", order_reference=order_reference, error=response.error)
            return None

        status = _STATUS_MAP.get(str(response.data.get("status", "")).upper())
        self._apply_status(order_reference, status)
        return status

    def _apply_status(self, order_reference: str, status: GatewayStatus | None) -> None:
        session = self.session
        if session.status != PaymentStatus.PROCESSING or session.order_reference != order_reference:
            return
        if status == GatewayStatus.SUCCESS:
            session.succeed()
            logger.info("payment_succeeded", order_reference=order_reference)
        elif status == GatewayStatus.PROCESSING:
            session.still_processing()
        elif status == GatewayStatus.FAILED:
            session.fail(DECLINED_MESSAGE)
            logger.info("payment_failed", order_reference=order_reference)

    def reset(self) -> None:
        """Forget local payment state. A transaction already at the gateway keeps running."""
        self.session.reset()
