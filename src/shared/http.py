"""Maps domain and payment failures to HTTP responses.

Raw transport exceptions never reach a response body; payment errors only
expose their ``user_message``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from payments.errors import ConfigurationError, PaymentError, PaymentTimeout


def _messages(exc) -> dict:
    messages = getattr(exc, "messages", None)
    return messages if isinstance(messages, dict) else {"_entity": [str(exc)]}


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "validation_error", "messages": _messages(exc)})


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "not_found", "detail": str(exc)})


async def payment_error_handler(request: Request, exc: PaymentError) -> JSONResponse:
    if isinstance(exc, ConfigurationError):
        status_code = 503
    elif isinstance(exc, PaymentTimeout):
        status_code = 202
    else:
        status_code = 402
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": exc.user_message, "recoverable": exc.recoverable},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(PaymentError, payment_error_handler)
