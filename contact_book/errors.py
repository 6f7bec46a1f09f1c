"""Domain errors and the handlers that turn them into JSON responses.

Every failure leaves the API as ``{"error": <message>, "code": <code>}``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors raised by services and the auth gate."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"


class InvalidCredentials(Unauthorized):
    code = "invalid_credentials"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


_HTTP_CODES = {
    status.HTTP_400_BAD_REQUEST: "bad_request",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


def error_response(status_code: int, message: str, code: str, headers=None):
    """Build the ``{error, code}`` JSON response."""
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "code": code},
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError):
    """Render an :class:`AppError` with its own status and code."""
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}
    return error_response(exc.status_code, exc.message, exc.code, headers)


def _describe(error: dict) -> str:
    """Format one pydantic error as ``field: message``."""
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Render request validation failures as 400 ``validation_error``."""
    message = "; ".join(_describe(error) for error in exc.errors())
    return error_response(
        status.HTTP_400_BAD_REQUEST, message or "invalid request", ValidationFailed.code
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render framework HTTP errors, such as unknown routes, in the envelope."""
    return error_response(
        exc.status_code,
        str(exc.detail),
        _HTTP_CODES.get(exc.status_code, "http_error"),
        getattr(exc, "headers", None),
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    """Log an unhandled storage error and hide its details from the client."""
    logger.exception("Unhandled storage error on %s %s", request.method, request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "internal storage error", "storage_error"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on ``app``."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)
