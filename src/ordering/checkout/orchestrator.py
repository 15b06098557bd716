"""Checkout orchestration: phone verification → payment → status polling → order.

The orchestrator owns one cart, one payment session and at most one running
poll. It never initiates a payment without a qualifying preview for the
current order reference, and it never clears the cart unless the order was
written.
"""

import asyncio
from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError

from ordering.cart.store import CartStore
from ordering.checkout.reference import generate_order_reference
from ordering.order.placement import assert_email_matches
from ordering.order.store import OrderStore
from payments.client import PaymentGatewayClient, PreviewResult
from payments.errors import GatewayRejected, PaymentStateError, PaymentTimeout
from payments.polling import MAX_POLL_ATTEMPTS, POLL_INTERVAL_SECONDS, PaymentPoll, PollOutcome
from payments.session import PaymentSession
from shared.auth import Principal

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CustomerDetails:
    name: str
    email: str
    phone: str
    shipping_address: str

    def to_dict(self) -> dict:
        return {
            "name": self.name.strip(),
            "email": self.email.strip(),
            "phone": self.phone.strip(),
            "shipping_address": self.shipping_address.strip(),
        }


@dataclass(frozen=True)
class CheckoutResult:
    order_id: str
    order_reference: str
    transaction_id: str
    total_amount: float


class OrderCreationError(Exception):
    """The payment settled but the order could not be written.

    Money may have moved without an order, so the customer is sent to
    support with both identifiers.
    """

    def __init__(self, order_reference: str, transaction_id: str | None) -> None:
        self.order_reference = order_reference
        self.transaction_id = transaction_id
        self.user_message = (
            "Your payment was received but we could not create your order. "
            f"Please contact support with reference {order_reference}"
            + (f" and transaction {transaction_id}." if transaction_id else ".")
        )
        super().__init__(self.user_message)


@dataclass(frozen=True)
class _PendingOrder:
    items: list
    total_amount: float
    customer: CustomerDetails


class CheckoutOrchestrator:
    def __init__(
        self,
        cart: CartStore,
        principal: Principal,
        orders: OrderStore | None = None,
        client: PaymentGatewayClient | None = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        max_poll_attempts: int = MAX_POLL_ATTEMPTS,
        sleep=asyncio.sleep,
    ) -> None:
        self.cart = cart
        self.principal = principal
        self.orders = orders or OrderStore()
        self.client = client or PaymentGatewayClient()
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self.sleep = sleep
        self.phone: str | None = None
        self._poll: PaymentPoll | None = None
        self._pending: _PendingOrder | None = None

    @property
    def session(self) -> PaymentSession:
        return self.client.session

    @property
    def polling(self) -> bool:
        return self._poll is not None and self._poll.running

    def _ensure_cart_has_items(self) -> None:
        if self.cart.is_empty:
            raise ValidationError({"cart": ["Your cart is empty"]})

    def _restart(self) -> None:
        self.cancel()
        self.client.reset()
        self._pending = None

    # -------------------------------------------------------------------
    # Step 1: phone verification
    # -------------------------------------------------------------------
    async def verify_phone(self, phone: str) -> PreviewResult:
        """Start a fresh checkout attempt for ``phone`` and preview it."""
        self._ensure_cart_has_items()
        self._restart()
        self.phone = phone
        order_reference = generate_order_reference()
        return await self.client.preview(phone, self.cart.total_price(), order_reference)

    def change_phone(self, phone: str | None = None) -> None:
        """Editing the number invalidates the attempt; verification restarts."""
        self._restart()
        self.phone = phone

    # -------------------------------------------------------------------
    # Step 2: payment
    # -------------------------------------------------------------------
    async def start_payment(self, customer: CustomerDetails) -> str:
        """Initiate the USSD push and start polling. Returns the gateway transaction id."""
        self._ensure_cart_has_items()
        assert_email_matches(self.principal.email, customer.email)

        order_reference = self.session.order_reference
        if not self.phone or not self.session.can_initiate(order_reference):
            raise PaymentStateError()

        pending = _PendingOrder(
            items=self.cart.snapshot(),
            total_amount=round(self.cart.total_price(), 2),
            customer=customer,
        )
        transaction_id = await self.client.initiate(self.phone, pending.total_amount, order_reference)

        self._pending = pending
        self._poll = PaymentPoll(
            self.client,
            order_reference,
            interval=self.poll_interval,
            max_attempts=self.max_poll_attempts,
            sleep=self.sleep,
        ).start()
        return transaction_id

    async def finish_payment(self) -> CheckoutResult:
        """Wait for the poll, then place the order on success.

        Raises GatewayRejected (payment declined), PaymentTimeout (outcome
        unknown) or OrderCreationError (paid, but no order). The cart is kept
        in all three cases.
        """
        poll, pending = self._poll, self._pending
        if poll is None or pending is None:
            raise PaymentStateError()

        try:
            outcome = await poll.result()
        finally:
            poll.cancel()
            self._poll = None

        order_reference = self.session.order_reference
        if outcome == PollOutcome.FAILED:
            raise GatewayRejected(self.session.last_error)
        if outcome == PollOutcome.TIMEOUT:
            raise PaymentTimeout(order_reference)

        gateway_transaction_id = self.session.transaction_id
        try:
            order_id = self.orders.place_order(
                account_email=self.principal.email,
                customer_id=self.principal.user_id,
                customer=pending.customer.to_dict(),
                items=pending.items,
                transaction_id=order_reference,
            )
        except Exception as exc:
            logger.error(
                "order_creation_failed",
                order_reference=order_reference,
                transaction_id=gateway_transaction_id,
                error=str(exc),
            )
            raise OrderCreationError(order_reference, gateway_transaction_id) from exc

        self.cart.clear()
        self.client.reset()
        self._pending = None
        self.phone = None
        logger.info("checkout_completed", order_id=order_id, order_reference=order_reference)
        return CheckoutResult(
            order_id=order_id,
            order_reference=order_reference,
            transaction_id=gateway_transaction_id,
            total_amount=pending.total_amount,
        )

    async def pay(self, customer: CustomerDetails) -> CheckoutResult:
        await self.start_payment(customer)
        return await self.finish_payment()

    def cancel(self) -> None:
        """Stop polling (the viewer left). The gateway transaction is not cancelled."""
        if self._poll is not None:
            self._poll.cancel()
            self._poll = None

    def to_dict(self) -> dict:
        return {
            "phone": self.phone,
            "polling": self.polling,
            "cart_total": self.cart.total_price(),
            "cart_items": self.cart.total_items(),
            "payment": self.session.to_dict(),
        }
