"""
Exception handlers for the FastAPI application.

Every error is rendered as ``{"error": true, "message", "code", "details", "status_code"}``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dpms.core.domain import (
    AuthorizationException,
    ChannelAuthFailureException,
    ChannelConnectionFailureException,
    ChannelException,
    ChannelInvalidAddressException,
    ChannelNotConfiguredException,
    ChannelRejectedException,
    ChannelTimeoutException,
    DomainException,
    EntityNotFoundException,
    NoContactAddressException,
    NoMatchingLinesException,
    PayloadAlreadyIssuedException,
    ValidationException,
)

logger = logging.getLogger(__name__)

# Most specific class first; the first isinstance match wins.
DOMAIN_STATUS_CODES: list[tuple[type[DomainException], int]] = [
    (EntityNotFoundException, status.HTTP_404_NOT_FOUND),
    (PayloadAlreadyIssuedException, status.HTTP_409_CONFLICT),
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (NoContactAddressException, status.HTTP_400_BAD_REQUEST),
    (NoMatchingLinesException, status.HTTP_400_BAD_REQUEST),
    (AuthorizationException, status.HTTP_403_FORBIDDEN),
    (ChannelNotConfiguredException, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ChannelAuthFailureException, status.HTTP_502_BAD_GATEWAY),
    (ChannelConnectionFailureException, status.HTTP_502_BAD_GATEWAY),
    (ChannelTimeoutException, status.HTTP_504_GATEWAY_TIMEOUT),
    (ChannelInvalidAddressException, status.HTTP_400_BAD_REQUEST),
    (ChannelRejectedException, status.HTTP_502_BAD_GATEWAY),
    (ChannelException, status.HTTP_502_BAD_GATEWAY),
]


def status_code_for(exc: DomainException) -> int:
    for exc_type, code in DOMAIN_STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def error_body(message: str, status_code: int, code: str | None = None, details=None) -> dict:
    return {
        "error": True,
        "message": message,
        "code": code,
        "details": details,
        "status_code": status_code,
    }


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translate domain exceptions using the status table above."""
    if not isinstance(exc, DomainException):
        return await global_exception_handler(request, exc)

    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=error_body(exc.message, status_code, exc.code, exc.details),
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle HTTPException with consistent response format."""
    if not isinstance(exc, StarletteHTTPException):
        return await global_exception_handler(request, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), exc.status_code, "HTTP_ERROR"),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle request validation errors with detailed error messages."""
    code = status.HTTP_422_UNPROCESSABLE_ENTITY
    if not isinstance(exc, RequestValidationError):
        return JSONResponse(status_code=code, content=error_body(str(exc), code, "REQUEST_VALIDATION_ERROR"))

    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Validation error on {request.url.path}: {errors}")

    return JSONResponse(
        status_code=code,
        content=error_body("Validation error", code, "REQUEST_VALIDATION_ERROR", errors),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all unhandled exceptions.

    Logs the full exception with traceback and returns a safe error response.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc!s}",
        exc_info=exc,
    )
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(status_code=code, content=error_body("Internal server error", code, "INTERNAL_ERROR"))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers registered")
