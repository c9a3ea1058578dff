# hms/core/errors.py
"""
Error taxonomy and the handlers that render it.

Every error leaves the API as a flat JSON object:

    {"error": "<short code>", "message": "<detail>", ...extra}

Clients branch on the status code and `error`, never on `message`.
"""

import logging
import traceback
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    """
    Base class for errors raised by endpoints and services.

    Subclasses fix the status code and machine code; `extra` is merged
    into the response body.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "unexpected"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, **extra: Any):
        super().__init__(
            status_code=self.status_code,
            detail=message or self.default_message,
        )
        self.extra = extra


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    default_message = "Authentication required"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Access denied"


class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_input"
    default_message = "Invalid input"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Duplicate entry"


class InvalidState(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_state"
    default_message = "Operation not allowed in the current state"


class TooManyRequests(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "too_many_requests"
    default_message = "Too many attempts. Please try again later."


class PaymentServiceError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "payment_service_error"
    default_message = "Payment service error"

    def __init__(self, message: str | None = None, status_code: int | None = None, **extra: Any):
        super().__init__(message, **extra)
        if status_code is not None:
            self.status_code = status_code


class Unexpected(AppError):
    pass


_STATUS_CODES = {
    400: "invalid_input",
    401: "unauthenticated",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    429: "too_many_requests",
}


def _body(code: str, message: str | None, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"error": code}
    if message:
        body["message"] = message
    body.update(extra)
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_body(exc.code, exc.detail, **exc.extra),
        headers=getattr(exc, "headers", None),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _STATUS_CODES.get(exc.status_code, "unexpected")
    message = exc.detail if isinstance(exc.detail, str) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=_body(code, message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        fields.append({"field": ".".join(loc), "message": err.get("msg", "")})

    if fields and fields[0]["field"]:
        message = f"Invalid or missing field: {fields[0]['field']}"
    else:
        message = "Invalid request body"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_body("invalid_input", message, fields=fields),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_body("conflict", "Duplicate entry"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)

    if request.app.state.settings.is_production:
        content = _body("unexpected", "Internal server error")
    else:
        content = _body(
            "unexpected",
            str(exc) or exc.__class__.__name__,
            stack=traceback.format_exception(type(exc), exc, exc.__traceback__),
        )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
