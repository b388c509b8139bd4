"""
Error taxonomy for the API.

Every error maps to an HTTP status and renders as `{"error": ...}`.
"""
import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class Fit360Error(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class AuthorizationError(Fit360Error):
    """Missing, expired or unknown session."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ConfigurationError(Fit360Error):
    """A required credential or setting is absent."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamError(Fit360Error):
    """An external API call failed."""

    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message, details)
        self.upstream_status = status_code


class ValidationError(Fit360Error):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(Fit360Error):
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(Fit360Error):
    status_code = status.HTTP_404_NOT_FOUND


def _error_body(message: str, details: Any = None) -> dict:
    body: dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    return body


async def fit360_error_handler(request: Request, exc: Fit360Error) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthorizationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.details),
        headers=headers,
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Invalid request", details),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error"),
    )


def register_error_handlers(app) -> None:
    app.add_exception_handler(Fit360Error, fit360_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
