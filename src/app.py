"""iTechGlass FastAPI application.

Serves the storefront checkout, the order endpoints for customers, admins and
drivers, and the live delivery tracking endpoints. Every request runs inside
the protean domain context that owns its URL prefix.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from ordering.api import checkout_router, driver_router, order_router
from ordering.domain import ordering
from tracking.api import delivery_router
from tracking.domain import tracking

from shared.http import register_exception_handlers
from shared.logging import configure_logging, log_context

configure_logging()

# PROTEAN_ENV selects the config overlay (memory store in test, Postgres in
# production). Domains are initialised once per worker.
ordering.init()
tracking.init()

_ROUTE_DOMAIN_MAP = {
    "/checkout": ordering,
    "/orders": ordering,
    "/driver": ordering,
    "/deliveries": tracking,
}


def _resolve_domain(path: str):
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


app = FastAPI(
    title="iTechGlass API",
    description="Storefront backend: mobile-money checkout, orders and delivery tracking",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the owning domain context and bind request fields for logging."""
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    with log_context(request_id=request_id, user_id=request.headers.get("X-User-Id")):
        domain = _resolve_domain(request.url.path)
        if domain is None:
            response = await call_next(request)
        else:
            with domain.domain_context():
                response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


register_exception_handlers(app)

app.include_router(checkout_router)
app.include_router(order_router)
app.include_router(driver_router)
app.include_router(delivery_router)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "domains": [ordering.name, tracking.name],
    }
