"""Mobile-money gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- ClickPesaGateway for production

Set PAYMENT_GATEWAY=clickpesa to use the real gateway.
"""

import os

from payments.gateway.clickpesa_adapter import ClickPesaGateway
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import MobileMoneyGateway

_current_gateway: MobileMoneyGateway | None = None


def _create_default_gateway() -> MobileMoneyGateway:
    if os.getenv("PAYMENT_GATEWAY", "fake").lower() == "clickpesa":
        return ClickPesaGateway()
    return FakeGateway()


def get_gateway() -> MobileMoneyGateway:
    """Return the current gateway. Defaults to FakeGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _create_default_gateway()
    return _current_gateway


def set_gateway(gateway: MobileMoneyGateway) -> None:
    """Override the active gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
