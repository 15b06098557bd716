import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Selects the config overlay every domain is initialized with.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


# ---------------------------------------------------------------------------
# Domains
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session")
def _ordering_domain():
    """Initialize the ordering domain once per session."""
    from ordering.domain import ordering

    ordering.init()
    return ordering


@pytest.fixture(scope="session")
def _tracking_domain():
    """Initialize the tracking domain once per session."""
    from tracking.domain import tracking

    tracking.init()
    return tracking


@pytest.fixture(scope="session", autouse=True)
def setup_databases(_ordering_domain, _tracking_domain):
    from shared.db import drop_db, setup_db

    setup_db(_ordering_domain)
    setup_db(_tracking_domain)

    yield

    drop_db(_ordering_domain)
    drop_db(_tracking_domain)


def _reset_domain(domain):
    with domain.domain_context():
        for _, provider in domain.providers.items():
            provider._data_reset()

        for _, broker in domain.brokers.items():
            broker._data_reset()

        domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def run_around_tests(_ordering_domain, _tracking_domain):
    """Cleanup stores and in-process adapters after every test"""
    yield

    from ordering.checkout.sessions import reset_checkout_sessions
    from ordering.mail import reset_mailer
    from payments.gateway import reset_gateway
    from tracking.geolocation import reset_geolocation
    from tracking.location.feed import reset_location_feed

    _reset_domain(_ordering_domain)
    _reset_domain(_tracking_domain)

    reset_checkout_sessions()
    reset_mailer()
    reset_gateway()
    reset_geolocation()
    reset_location_feed()
