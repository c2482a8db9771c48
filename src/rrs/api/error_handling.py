from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rrs.api.middleware.request_id import get_request_id
from rrs.application.errors import (
    ConflictError,
    ForbiddenError,
    InfrastructureError,
    InvalidBookingTransitionError,
    NotFoundError,
    ReservationError,
    UnauthenticatedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first; the first matching base decides the status.
_STATUS_BY_ERROR: list[tuple[type[ReservationError], int]] = [
    (ValidationError, 400),
    (UnauthenticatedError, 401),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidBookingTransitionError, 409),
    (InfrastructureError, 503),
]


def status_for(exc: ReservationError) -> int:
    for exc_cls, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, exc_cls):
            return status_code
    return 500


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            },
            "requestId": get_request_id(),
        },
    )


async def _reservation_error_handler(_: Request, exc: Exception) -> JSONResponse:
    reservation_exc = cast(ReservationError, exc)
    status_code = status_for(reservation_exc)
    if status_code >= 500:
        logger.error(
            "request_failed",
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={"error_code": reservation_exc.code, "status_code": status_code},
        )
    return _error_response(
        status_code=status_code,
        code=reservation_exc.code,
        message=str(reservation_exc),
        details=reservation_exc.details,
    )


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 405:
        code = "METHOD_NOT_ALLOWED"
    elif http_exc.status_code == 400:
        code = "BAD_REQUEST"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    violations = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or "body",
            "message": str(error.get("msg", "invalid value")),
        }
        for error in validation_exc.errors()
    ]
    return _error_response(
        status_code=400,
        code=ValidationError.code,
        message="request validation failed",
        details={"violations": violations},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReservationError, _reservation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
