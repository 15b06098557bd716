"""Failure vocabulary of the mobile-money payment flow.

Every gateway or transport problem is converted into one of these before it
leaves the payments package. Each carries a ``user_message`` that is safe to
show the customer as-is.
"""


class PaymentError(Exception):
    """Base class for all payment flow failures."""

    default_message = "Payment could not be processed. Please try again."
    recoverable = True

    def __init__(self, user_message: str | None = None) -> None:
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class ConfigurationError(PaymentError):
    """Gateway credentials or environment are missing. Fatal, never retried."""

    default_message = "Payment service is temporarily unavailable."
    recoverable = False


class PreviewError(PaymentError):
    default_message = "Could not verify this phone number. Check it and try again."


class NoAvailableMethodError(PreviewError):
    """The number has no AVAILABLE mobile-money method."""

    default_message = "No payment methods available for this phone number. Try a different number or provider."


class GatewayRejected(PaymentError):
    """The gateway declined the request; its message is surfaced verbatim."""

    default_message = "Payment was declined or failed."


class PaymentTimeout(PaymentError):
    """Polling exhausted before a terminal status.

    The charge may still settle out-of-band, so this is never reported as a
    failed payment.
    """

    default_message = (
        "Payment confirmation is taking longer than expected. "
        "Please check your phone and your order status before paying again."
    )

    def __init__(self, order_reference: str, user_message: str | None = None) -> None:
        self.order_reference = order_reference
        if user_message is None and order_reference:
            user_message = f"{self.default_message} Reference: {order_reference}"
        super().__init__(user_message)


class TransportError(PaymentError):
    """Network failure while talking to the gateway."""

    default_message = "Could not reach the payment service. Please try again."


class PaymentStateError(PaymentError):
    """Operation not permitted in the current session state."""

    default_message = "Please verify your phone number before paying."
