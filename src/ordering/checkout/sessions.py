"""In-process registry of open checkouts behind the HTTP API.

Each checkout belongs to the principal that opened it. Paying runs the
finish step as a background task; clients poll the checkout for the outcome.
Entries that sit idle, or finished, past the retention window are evicted.
"""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

import structlog
from protean.exceptions import ObjectNotFoundError

from ordering.checkout.orchestrator import CheckoutOrchestrator, CheckoutResult, OrderCreationError
from payments.errors import PaymentError, PaymentTimeout

logger = structlog.get_logger(__name__)

RETENTION_SECONDS = 30 * 60

# Money moved but no order exists; support has to reconcile by hand.
ORDER_FAILED_AFTER_PAYMENT = "payment_received_order_failed"


@dataclass
class CheckoutEntry:
    checkout_id: str
    owner_id: str
    orchestrator: CheckoutOrchestrator
    touched_at: float = 0.0
    finish_task: asyncio.Task | None = field(default=None, repr=False)
    result: CheckoutResult | None = None
    error: Exception | None = None

    @property
    def state(self) -> str:
        if self.result is not None:
            return "completed"
        if isinstance(self.error, OrderCreationError):
            return ORDER_FAILED_AFTER_PAYMENT
        if isinstance(self.error, PaymentTimeout):
            return "timed_out"
        if self.error is not None:
            return "failed"
        if self.awaiting_payment:
            return "awaiting_payment"
        if self.finish_task is not None and self.finish_task.cancelled():
            return "cancelled"
        return "open"

    @property
    def awaiting_payment(self) -> bool:
        return self.finish_task is not None and not self.finish_task.done()

    @property
    def order_reference(self) -> str | None:
        if self.result is not None:
            return self.result.order_reference
        if isinstance(self.error, OrderCreationError):
            return self.error.order_reference
        return self.orchestrator.session.order_reference

    @property
    def transaction_id(self) -> str | None:
        if self.result is not None:
            return self.result.transaction_id
        if isinstance(self.error, OrderCreationError):
            return self.error.transaction_id
        return self.orchestrator.session.transaction_id

    def to_dict(self) -> dict:
        return {
            "checkout_id": self.checkout_id,
            "state": self.state,
            "order_id": self.result.order_id if self.result else None,
            "order_reference": self.order_reference,
            "transaction_id": self.transaction_id,
            "error": getattr(self.error, "user_message", None) if self.error else None,
            **self.orchestrator.to_dict(),
        }


class CheckoutSessions:
    def __init__(self, retention_seconds: float = RETENTION_SECONDS, clock: Callable[[], float] = time.monotonic):
        self._entries: dict[str, CheckoutEntry] = {}
        self.retention_seconds = retention_seconds
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def open(self, orchestrator: CheckoutOrchestrator) -> CheckoutEntry:
        self.evict_expired()
        checkout_id = str(uuid4())
        entry = CheckoutEntry(
            checkout_id=checkout_id,
            owner_id=orchestrator.principal.user_id,
            orchestrator=orchestrator,
            touched_at=self._clock(),
        )
        self._entries[checkout_id] = entry
        return entry

    def get(self, checkout_id: str, owner_id: str) -> CheckoutEntry:
        self.evict_expired()
        entry = self._entries.get(checkout_id)
        if entry is None or entry.owner_id != owner_id:
            raise ObjectNotFoundError(f"Checkout {checkout_id} not found")
        entry.touched_at = self._clock()
        return entry

    def finish_in_background(self, entry: CheckoutEntry) -> asyncio.Task:
        """Run the finish step as a task; its outcome lands on the entry."""
        entry.result = None
        entry.error = None

        async def _finish():
            try:
                entry.result = await entry.orchestrator.finish_payment()
            except OrderCreationError as exc:
                entry.error = exc
                logger.error(
                    "checkout_order_failed_after_payment",
                    checkout_id=entry.checkout_id,
                    order_reference=exc.order_reference,
                    transaction_id=exc.transaction_id,
                )
            except PaymentError as exc:
                entry.error = exc
                logger.info("checkout_unsuccessful", checkout_id=entry.checkout_id, error=type(exc).__name__)
            finally:
                # The retention window for reading the outcome starts now.
                entry.touched_at = self._clock()

        entry.finish_task = asyncio.create_task(_finish())
        return entry.finish_task

    def evict_expired(self) -> int:
        """Drop entries idle past the retention window. A running finish step is never evicted."""
        cutoff = self._clock() - self.retention_seconds
        expired = [
            entry for entry in self._entries.values() if not entry.awaiting_payment and entry.touched_at < cutoff
        ]
        for entry in expired:
            self._discard(entry)
        if expired:
            logger.debug("checkouts_evicted", count=len(expired))
        return len(expired)

    def close(self, checkout_id: str, owner_id: str) -> None:
        self._discard(self.get(checkout_id, owner_id))

    def _discard(self, entry: CheckoutEntry) -> None:
        entry.orchestrator.cancel()
        if entry.finish_task is not None:
            entry.finish_task.cancel()
        self._entries.pop(entry.checkout_id, None)

    def reset(self) -> None:
        for entry in list(self._entries.values()):
            self._discard(entry)


_current_sessions: CheckoutSessions | None = None


def get_checkout_sessions() -> CheckoutSessions:
    global _current_sessions
    if _current_sessions is None:
        _current_sessions = CheckoutSessions()
    return _current_sessions


def reset_checkout_sessions() -> None:
    global _current_sessions
    if _current_sessions is not None:
        _current_sessions.reset()
    _current_sessions = None
