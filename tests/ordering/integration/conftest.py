import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from ordering.api.routes import checkout_router, driver_router, order_router
from shared.http import register_exception_handlers


@pytest.fixture()
def app(_ordering_domain):
    app = FastAPI()
    register_exception_handlers(app)

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with _ordering_domain.domain_context():
            return await call_next(request)

    app.include_router(checkout_router)
    app.include_router(order_router)
    app.include_router(driver_router)
    return app


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client
