"""Client-side payment session.

State Machine:
    IDLE → PREVIEWING → IDLE (preview ok) | FAILED
    IDLE → INITIATING → PROCESSING (initiate ok) | FAILED
    PROCESSING → PROCESSING (still pending) | SUCCESS | FAILED

SUCCESS and FAILED are terminal; only reset() returns the session to IDLE.
A reset never cancels a transaction already running at the gateway.
"""

from dataclasses import dataclass
from enum import Enum

from payments.errors import PaymentStateError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentStatus(Enum):
    IDLE = "idle"
    PREVIEWING = "previewing"
    INITIATING = "initiating"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"


class MethodAvailability(Enum):
    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"


_VALID_TRANSITIONS = {
    PaymentStatus.IDLE: {PaymentStatus.PREVIEWING, PaymentStatus.INITIATING},
    PaymentStatus.PREVIEWING: {PaymentStatus.IDLE, PaymentStatus.FAILED},
    PaymentStatus.INITIATING: {PaymentStatus.PROCESSING, PaymentStatus.FAILED},
    PaymentStatus.PROCESSING: {PaymentStatus.PROCESSING, PaymentStatus.SUCCESS, PaymentStatus.FAILED},
    PaymentStatus.SUCCESS: set(),  # Terminal
    PaymentStatus.FAILED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PaymentMethodOption:
    """One mobile-money method as reported by a preview."""

    name: str
    availability: MethodAvailability
    fee: float | None = None
    message: str | None = None

    @property
    def available(self) -> bool:
        return self.availability == MethodAvailability.AVAILABLE

    @classmethod
    def from_gateway(cls, raw: dict) -> "PaymentMethodOption":
        status = str(raw.get("status", "")).upper()
        try:
            fee = float(raw["fee"]) if raw.get("fee") is not None else None
        except (TypeError, ValueError):
            # Fee is informational only.
            fee = None
        return cls(
            name=str(raw.get("name", "")),
            availability=(
                MethodAvailability.AVAILABLE if status == MethodAvailability.AVAILABLE.value
                else MethodAvailability.UNAVAILABLE
            ),
            fee=fee,
            message=raw.get("message") or None,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "availability": self.availability.value,
            "fee": self.fee,
            "message": self.message,
        }


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
class PaymentSession:
    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.status = PaymentStatus.IDLE
        self.order_reference: str | None = None
        self.available_methods: list[PaymentMethodOption] = []
        self.sender: dict | None = None
        self.transaction_id: str | None = None
        self.last_error: str | None = None
        self.timed_out = False
        self._qualified_reference: str | None = None

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _transition(self, target: PaymentStatus) -> None:
        if target not in _VALID_TRANSITIONS[self.status]:
            raise PaymentStateError(f"Cannot move payment from {self.status.value} to {target.value}")
        self.status = target

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[self.status]

    def can_initiate(self, order_reference: str) -> bool:
        """True only when the latest preview for this reference found an AVAILABLE method."""
        return (
            self.status == PaymentStatus.IDLE
            and order_reference is not None
            and self._qualified_reference == order_reference
        )

    # -------------------------------------------------------------------
    # Preview
    # -------------------------------------------------------------------
    def begin_preview(self, order_reference: str) -> None:
        self._transition(PaymentStatus.PREVIEWING)
        self.order_reference = order_reference
        self.available_methods = []
        self.sender = None
        self.last_error = None
        self._qualified_reference = None

    def preview_succeeded(self, methods: list[PaymentMethodOption], sender: dict | None = None) -> None:
        self.available_methods = list(methods)
        self.sender = sender
        if any(method.available for method in methods):
            self._qualified_reference = self.order_reference
        self._transition(PaymentStatus.IDLE)

    # -------------------------------------------------------------------
    # Initiate and settle
    # -------------------------------------------------------------------
    def begin_initiate(self, order_reference: str) -> None:
        if not self.can_initiate(order_reference):
            raise PaymentStateError()
        self._transition(PaymentStatus.INITIATING)
        self.last_error = None

    def initiate_succeeded(self, transaction_id: str) -> None:
        self.transaction_id = transaction_id
        self._qualified_reference = None
        self._transition(PaymentStatus.PROCESSING)

    def still_processing(self) -> None:
        self._transition(PaymentStatus.PROCESSING)

    def succeed(self) -> None:
        self._transition(PaymentStatus.SUCCESS)

    def fail(self, message: str) -> None:
        self._qualified_reference = None
        self.last_error = message
        self._transition(PaymentStatus.FAILED)

    def mark_timed_out(self) -> None:
        """Polling gave up; the session stays PROCESSING."""
        self.timed_out = True

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "order_reference": self.order_reference,
            "available_methods": [method.to_dict() for method in self.available_methods],
            "sender": self.sender,
            "transaction_id": self.transaction_id,
            "last_error": self.last_error,
            "timed_out": self.timed_out,
        }
