import asyncio

import pytest


@pytest.fixture(autouse=True)
def _ctx(_tracking_domain):
    with _tracking_domain.domain_context():
        yield


@pytest.fixture
def geolocation():
    from tracking.geolocation import reset_geolocation, set_geolocation
    from tracking.geolocation.fake_adapter import FakeGeolocation

    fake = FakeGeolocation()
    set_geolocation(fake)
    yield fake
    reset_geolocation()


@pytest.fixture
def place_assigned_order():
    """Place an order and assign it to ``driver_id``. Returns the order id."""
    from ordering.order.store import OrderStore

    def _place(driver_id="drv-001", customer_id="cust-001"):
        store = OrderStore()
        order_id = store.place_manual_payment_order(
            account_email="asha@example.com",
            customer_id=customer_id,
            customer={
                "name": "Asha Mwakyusa",
                "email": "asha@example.com",
                "phone": "0712345678",
                "shipping_address": "Plot 12, Msasani, Dar es Salaam",
            },
            items=[{"product_id": "prod-001", "name": "Tempered Glass", "price": 15000.0, "quantity": 1}],
            payment_method="mpesa",
            transaction_id="MP240101ABC",
        )
        store.assign_driver(order_id, driver_id)
        return order_id

    return _place


class ManualClock:
    """Stands in for asyncio.sleep; each call parks until the test advances the clock."""

    def __init__(self):
        self.waiters: list = []
        self.requested: list[float] = []

    async def sleep(self, seconds):
        self.requested.append(seconds)
        future = asyncio.get_running_loop().create_future()
        self.waiters.append(future)
        await future

    async def tick(self):
        """Release every parked sleeper and let them run to their next await."""
        waiters, self.waiters = self.waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(None)
        for _ in range(5):
            await asyncio.sleep(0)


@pytest.fixture
def clock():
    return ManualClock()
