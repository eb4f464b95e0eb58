"""
Exception handlers for FastAPI application.

This module follows SRP by centralizing all exception handling logic.
Every error response has the shape
``{"error": true, "code", "message", "details", "status_code"}``.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException

from app.core.domain import (
    AuthorizationException,
    ConflictException,
    DomainException,
    EntityNotFoundException,
    IntegrationException,
    ValidationException,
)

logger = logging.getLogger(__name__)

# Most specific class first; DomainException is the fallback
DOMAIN_STATUS_CODES: tuple[tuple[type[DomainException], int], ...] = (
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (EntityNotFoundException, status.HTTP_404_NOT_FOUND),
    (AuthorizationException, status.HTTP_403_FORBIDDEN),
    (ConflictException, status.HTTP_409_CONFLICT),
    (IntegrationException, status.HTTP_502_BAD_GATEWAY),
)


def status_for(exc: DomainException) -> int:
    for exc_type, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def error_body(status_code: int, code: str, message: Any, details: Any = None) -> dict[str, Any]:
    return {
        "error": True,
        "code": code,
        "message": message,
        "details": details if details is not None else {},
        "status_code": status_code,
    }


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translate domain exceptions into their HTTP status."""
    if not isinstance(exc, DomainException):
        return await global_exception_handler(request, exc)

    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=error_body(status_code, exc.code, exc.message, exc.details),
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle HTTPException with consistent response format."""
    http_exc = exc if isinstance(exc, HTTPException) else HTTPException(status_code=500, detail=str(exc))
    return JSONResponse(
        status_code=http_exc.status_code,
        content=error_body(http_exc.status_code, f"HTTP_{http_exc.status_code}", http_exc.detail),
        headers=http_exc.headers,
    )


def _field_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in errors
    ]


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle request validation errors with detailed error messages."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    if not isinstance(exc, (RequestValidationError, ValidationError)):
        return JSONResponse(status_code=status_code, content=error_body(status_code, "REQUEST_VALIDATION", str(exc)))

    errors = _field_errors(exc.errors())
    logger.warning(f"Validation error on {request.url.path}: {errors}")

    return JSONResponse(
        status_code=status_code,
        content=error_body(status_code, "REQUEST_VALIDATION", "Validation error", errors),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all unhandled exceptions.

    Logs the full exception with traceback and returns a safe error response.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc!s}",
        exc_info=True,
    )

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return JSONResponse(
        status_code=status_code,
        content=error_body(status_code, "INTERNAL_ERROR", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers registered")
