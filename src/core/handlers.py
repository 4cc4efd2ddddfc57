"""
Exception handlers for FastAPI application.

This module is the single place where failures are turned into ApiResponse
envelopes:
- Application exceptions (AppException, tagged with an ErrorKind)
- Request validation errors (RequestValidationError)
- Framework HTTP errors (unknown route, wrong method, oversized body)
- Integrity violations from the database
- Rate limit exceeded errors (RateLimitExceeded)
- Anything else (generic internal error, details only in the logs)
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import AppException, ErrorKind
from schemas.common import ApiResponse, FieldError

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def envelope_response(
    envelope: ApiResponse,
    status_code: int,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render an envelope as a JSON response with the given status."""
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(mode="json"),
        headers=headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle application exceptions.

    The kind decides the status code; message and payload come from the exception.
    """
    logger.warning(
        f"Application exception: {exc.error_code} - {exc.message} "
        f"(request_id={_request_id(request)})"
    )

    headers = None
    if exc.kind is ErrorKind.AUTHENTICATION:
        headers = {"WWW-Authenticate": "Bearer"}

    return envelope_response(ApiResponse.from_exception(exc), exc.status_code, headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    A body that is not valid JSON is a malformed request; everything else is a
    field-level validation failure carrying the list of field errors.
    """
    errors = exc.errors()
    logger.warning(f"Validation error: {errors} (request_id={_request_id(request)})")

    if any(error.get("type") == "json_invalid" for error in errors):
        kind = ErrorKind.MALFORMED_REQUEST
        return envelope_response(
            ApiResponse.from_kind(kind, "Request body is not valid JSON"),
            kind.status_code,
        )

    details = [
        FieldError(
            field=".".join(str(loc) for loc in error.get("loc", ())),
            message=error.get("msg", "Invalid value"),
            type=error.get("type"),
        ).model_dump()
        for error in errors
    ]

    kind = ErrorKind.VALIDATION
    return envelope_response(ApiResponse.from_kind(kind, data=details), kind.status_code)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    Handle framework-level HTTP errors (404 route, 405 method, 413 body, ...).

    Only the category message is returned; the framework detail is logged.
    """
    kind = ErrorKind.from_status_code(exc.status_code)
    logger.warning(
        f"HTTP error {exc.status_code}: {exc.detail} "
        f"(request_id={_request_id(request)})"
    )
    return envelope_response(
        ApiResponse.from_kind(kind),
        exc.status_code,
        getattr(exc, "headers", None),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    Handle database integrity violations (unique keys, foreign keys).

    The raw database message never reaches the client.
    """
    logger.warning(
        f"Integrity violation: {exc.orig} (request_id={_request_id(request)})"
    )
    kind = ErrorKind.CONFLICT
    return envelope_response(
        ApiResponse.from_kind(kind, "The request conflicts with existing data"),
        kind.status_code,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full error and returns a generic internal error to the client.
    """
    logger.error(
        f"Unexpected error: {exc!r} (request_id={_request_id(request)})",
        exc_info=exc,
    )
    kind = ErrorKind.INTERNAL
    return envelope_response(ApiResponse.from_kind(kind), kind.status_code)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors."""
    logger.warning(
        f"Rate limit exceeded: {request.client.host if request.client else 'unknown'} "
        f"(request_id={_request_id(request)})"
    )
    kind = ErrorKind.RATE_LIMITED
    return envelope_response(ApiResponse.from_kind(kind), kind.status_code)
