"""
Application failure type for the KM Portal.

Every business failure is raised as an ``AppException`` tagged with an
``ErrorKind``. The kind decides the HTTP status, the machine-readable error
code and the default message; the exception handlers turn it into an
``ApiResponse`` envelope.

Kinds and their defaults:
    VALIDATION          422  VALIDATION_ERROR
    MALFORMED_REQUEST   400  MALFORMED_REQUEST
    AUTHENTICATION      401  AUTHENTICATION_FAILED
    AUTHORIZATION       403  FORBIDDEN
    NOT_FOUND           404  NOT_FOUND
    UNSUPPORTED_METHOD  405  METHOD_NOT_ALLOWED
    CONFLICT            409  CONFLICT
    PAYLOAD_TOO_LARGE   413  PAYLOAD_TOO_LARGE
    RATE_LIMITED        429  RATE_LIMIT_EXCEEDED
    INTERNAL            500  INTERNAL_ERROR
"""

import enum
from typing import Any, NamedTuple


class _KindInfo(NamedTuple):
    status_code: int
    error_code: str
    default_message: str


class ErrorKind(str, enum.Enum):
    """Failure categories visible at the API boundary."""

    VALIDATION = "validation"
    MALFORMED_REQUEST = "malformed_request"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    UNSUPPORTED_METHOD = "unsupported_method"
    CONFLICT = "conflict"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _KIND_INFO[self].status_code

    @property
    def error_code(self) -> str:
        return _KIND_INFO[self].error_code

    @property
    def default_message(self) -> str:
        return _KIND_INFO[self].default_message

    @classmethod
    def from_status_code(cls, status_code: int) -> "ErrorKind":
        """
        Map a transport status code back to a kind.

        Unknown 4xx codes fall back to MALFORMED_REQUEST, anything else to INTERNAL.
        """
        for kind, info in _KIND_INFO.items():
            if info.status_code == status_code:
                return kind
        if 400 <= status_code < 500:
            return cls.MALFORMED_REQUEST
        return cls.INTERNAL


_KIND_INFO: dict[ErrorKind, _KindInfo] = {
    ErrorKind.VALIDATION: _KindInfo(422, "VALIDATION_ERROR", "Request validation failed"),
    ErrorKind.MALFORMED_REQUEST: _KindInfo(400, "MALFORMED_REQUEST", "Malformed request"),
    ErrorKind.AUTHENTICATION: _KindInfo(401, "AUTHENTICATION_FAILED", "Authentication required"),
    ErrorKind.AUTHORIZATION: _KindInfo(403, "FORBIDDEN", "You do not have permission to perform this action"),
    ErrorKind.NOT_FOUND: _KindInfo(404, "NOT_FOUND", "Resource not found"),
    ErrorKind.UNSUPPORTED_METHOD: _KindInfo(405, "METHOD_NOT_ALLOWED", "HTTP method not supported for this resource"),
    ErrorKind.CONFLICT: _KindInfo(409, "CONFLICT", "Request conflicts with existing data"),
    ErrorKind.PAYLOAD_TOO_LARGE: _KindInfo(413, "PAYLOAD_TOO_LARGE", "Request payload is too large"),
    ErrorKind.RATE_LIMITED: _KindInfo(429, "RATE_LIMIT_EXCEEDED", "Rate limit exceeded. Please try again later."),
    ErrorKind.INTERNAL: _KindInfo(500, "INTERNAL_ERROR", "An unexpected error occurred. Please contact support."),
}


class AppException(Exception):
    """
    Base exception class for all application failures.

    Attributes:
        kind: Failure category (drives status code and error code)
        message: Human-readable message shown to the caller
        data: Optional structured payload (e.g. field-level errors)
        error_code: Machine-readable code, defaults to the kind's code
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        data: Any = None,
        error_code: str | None = None,
    ) -> None:
        self.kind = kind
        self.message = message or kind.default_message
        self.data = data
        self.error_code = error_code or kind.error_code
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def __repr__(self) -> str:
        return f"AppException(kind={self.kind.value}, message={self.message!r})"

    # -------------------------------------------------------------------------
    # Convenience constructors
    # -------------------------------------------------------------------------

    @classmethod
    def validation(cls, message: str, field: str | None = None) -> "AppException":
        """Field-level validation failure; ``field`` ends up in the payload."""
        data = [{"field": field, "message": message}] if field else None
        return cls(ErrorKind.VALIDATION, message, data=data)

    @classmethod
    def malformed(cls, message: str | None = None) -> "AppException":
        return cls(ErrorKind.MALFORMED_REQUEST, message)

    @classmethod
    def authentication(
        cls, message: str | None = None, error_code: str | None = None
    ) -> "AppException":
        return cls(ErrorKind.AUTHENTICATION, message, error_code=error_code)

    @classmethod
    def authorization(cls, message: str | None = None) -> "AppException":
        return cls(ErrorKind.AUTHORIZATION, message)

    @classmethod
    def not_found(cls, resource: str = "Resource") -> "AppException":
        return cls(ErrorKind.NOT_FOUND, f"{resource} not found")

    @classmethod
    def conflict(cls, message: str | None = None) -> "AppException":
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def internal(cls, message: str | None = None) -> "AppException":
        return cls(ErrorKind.INTERNAL, message)
