"""Mobile-money gateway port (abstract interface).

Mirrors the server-side proxy contract: every call returns
``{success, data?, error?}``. Adapters hold the credentials; callers never do.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class GatewayResponse:
    """Result of a single gateway call."""

    success: bool
    data: dict = field(default_factory=dict)
    error: str | None = None


class MobileMoneyGateway(ABC):
    """Abstract USSD-push gateway interface."""

    @abstractmethod
    def preview(self, phone_number: str, amount: float, order_reference: str) -> GatewayResponse:
        """Ask which payment methods are active for the number.

        ``data`` carries ``activeMethods: [{name, status, fee?, message?}]``
        and optionally ``sender`` details.
        """
        ...

    @abstractmethod
    def initiate(self, phone_number: str, amount: float, order_reference: str) -> GatewayResponse:
        """Push the USSD prompt to the payer's phone.

        ``data`` carries ``{id, status, channel, orderReference,
        collectedAmount, collectedCurrency, createdAt}``.
        """
        ...

    @abstractmethod
    def status(self, order_reference: str) -> GatewayResponse:
        """Current status of the transaction: PROCESSING, SUCCESS, SETTLED or FAILED."""
        ...
