"""HTTP rendering of domain errors.

Lifecycle failures answer ``{"error": message, "code": name}``; missing
resources answer 404 ``{"error": message}``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from fleetops.order.errors import (
    IntegratedVendorDispatchFailed,
    OrderLifecycleError,
    StaleOrderRevision,
)

_STATUS_CODES = {
    StaleOrderRevision: 409,
    IntegratedVendorDispatchFailed: 502,
}


def _first_message(exc) -> str:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, str):
        return messages
    if isinstance(messages, dict):
        for value in messages.values():
            if isinstance(value, list) and value:
                return str(value[0])
            if value:
                return str(value)
    return exc.args[0] if exc.args and isinstance(exc.args[0], str) else str(exc)


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(ObjectNotFoundError)
    async def not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": _first_message(exc)})

    @app.exception_handler(OrderLifecycleError)
    async def lifecycle_error(request: Request, exc: OrderLifecycleError) -> JSONResponse:
        return JSONResponse(
            status_code=_STATUS_CODES.get(type(exc), 400),
            content={"error": exc.message, "code": exc.code},
        )

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": _first_message(exc), "code": "ValidationError", "messages": exc.messages},
        )
