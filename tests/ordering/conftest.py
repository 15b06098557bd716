import pytest


@pytest.fixture(autouse=True)
def _ctx(_ordering_domain):
    with _ordering_domain.domain_context():
        yield


@pytest.fixture
def mailer():
    from ordering.mail import reset_mailer, set_mailer
    from ordering.mail.fake_adapter import FakeMailAdapter

    fake = FakeMailAdapter()
    set_mailer(fake)
    yield fake
    reset_mailer()


@pytest.fixture
def gateway():
    from payments.gateway import reset_gateway, set_gateway
    from payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture
def customer():
    return {
        "name": "Asha Mwakyusa",
        "email": "asha@example.com",
        "phone": "0712345678",
        "shipping_address": "Plot 12, Msasani, Dar es Salaam",
    }


@pytest.fixture
def items():
    return [
        {
            "product_id": "prod-001",
            "name": "Tempered Glass iPhone 14",
            "price": 15000.0,
            "quantity": 1,
            "selected_variant": "Clear",
            "image": None,
        },
        {
            "product_id": "prod-002",
            "name": "Camera Lens Protector",
            "price": 5000.0,
            "quantity": 2,
            "selected_variant": None,
            "image": None,
        },
    ]
