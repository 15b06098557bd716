import pytest
from payments.client import PaymentGatewayClient
from payments.gateway import reset_gateway, set_gateway
from payments.gateway.fake_adapter import FakeGateway


@pytest.fixture
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture
def client(gateway):
    return PaymentGatewayClient(gateway=gateway)


@pytest.fixture
def sleeps():
    """Records requested sleeps without waiting."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(seconds):
        sleeps.append(seconds)

    return _sleep
