"""
Common Pydantic schemas for API request/response handling.

This module provides:
- The ApiResponse envelope returned by every endpoint (success and failure)
- Pagination parameters and response models
- Sorting parameters
- Field-level error details
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    model_serializer,
    model_validator,
)

from core.exceptions import ErrorKind

if TYPE_CHECKING:
    from core.exceptions import AppException

# Type variable for generic responses
DataT = TypeVar("DataT")


# =============================================================================
# Response Envelope
# =============================================================================


class ApiResponse(BaseModel, Generic[DataT]):
    """
    Uniform success/failure envelope.

    Exactly two shapes exist:
    - ok:  success=True,  error_code absent, optional data
    - err: success=False, error_code present, optional data (e.g. field errors)

    The error_code key is omitted from the serialized output when absent so
    clients can switch on its presence.

    Attributes:
        success: Whether the operation succeeded
        message: Human-readable message
        data: Optional payload
        error_code: Machine-readable error code (failures only)
        timestamp: When the envelope was generated (UTC)
    """

    success: bool
    message: str
    data: DataT | None = None
    error_code: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def _error_code_iff_failure(self) -> "ApiResponse[DataT]":
        if self.success and self.error_code is not None:
            raise ValueError("error_code must be absent on a successful response")
        if not self.success and not self.error_code:
            raise ValueError("error_code is required on a failed response")
        return self

    @model_serializer(mode="wrap")
    def _omit_absent_error_code(
        self, handler: SerializerFunctionWrapHandler, info: SerializationInfo
    ) -> dict[str, Any]:
        payload = handler(self)
        if payload.get("error_code") is None:
            payload.pop("error_code", None)
        return payload

    def is_ok(self) -> bool:
        return self.success

    def is_err(self) -> bool:
        return not self.success

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def ok(cls, data: Any = None, message: str = "Request processed successfully") -> "ApiResponse":
        return cls(success=True, message=message, data=data)

    @classmethod
    def err(cls, error_code: str, message: str, data: Any = None) -> "ApiResponse":
        return cls(success=False, message=message, data=data, error_code=error_code)

    @classmethod
    def from_kind(
        cls, kind: ErrorKind, message: str | None = None, data: Any = None
    ) -> "ApiResponse":
        return cls.err(kind.error_code, message or kind.default_message, data)

    @classmethod
    def from_exception(cls, exc: "AppException") -> "ApiResponse":
        return cls.err(exc.error_code, exc.message, exc.data)

    @classmethod
    def not_found(cls, message: str | None = None) -> "ApiResponse":
        return cls.from_kind(ErrorKind.NOT_FOUND, message)

    @classmethod
    def bad_request(cls, message: str | None = None) -> "ApiResponse":
        return cls.from_kind(ErrorKind.MALFORMED_REQUEST, message)

    @classmethod
    def unauthorized(cls, message: str | None = None) -> "ApiResponse":
        return cls.from_kind(ErrorKind.AUTHENTICATION, message)

    @classmethod
    def forbidden(cls, message: str | None = None) -> "ApiResponse":
        return cls.from_kind(ErrorKind.AUTHORIZATION, message)

    @classmethod
    def validation_error(cls, message: str | None = None, data: Any = None) -> "ApiResponse":
        return cls.from_kind(ErrorKind.VALIDATION, message, data)

    @classmethod
    def conflict(cls, message: str | None = None) -> "ApiResponse":
        return cls.from_kind(ErrorKind.CONFLICT, message)

    @classmethod
    def internal_error(cls, message: str | None = None) -> "ApiResponse":
        return cls.from_kind(ErrorKind.INTERNAL, message)


class FieldError(BaseModel):
    """
    Detailed error information for a specific request field.

    Attributes:
        field: Dotted location of the field that caused the error
        message: Human-readable error message
        type: Validator error type (optional)
    """

    field: str | None = Field(default=None, description="Field with error")
    message: str = Field(description="Error message")
    type: str | None = Field(default=None, description="Error type")


# =============================================================================
# Sorting
# =============================================================================


class SortOrder(str, Enum):
    """
    Sort direction for list queries.

    Values:
        ASC: Ascending order (A-Z, 0-9, oldest first)
        DESC: Descending order (Z-A, 9-0, newest first)
    """

    ASC = "asc"
    DESC = "desc"


# =============================================================================
# Pagination
# =============================================================================


class PaginationParams(BaseModel):
    """
    Query parameters for paginated list endpoints.

    Attributes:
        page: Page number (1-indexed)
        page_size: Number of items per page (max 100)
    """

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Number of items per page (max 100)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "page": 1,
                "page_size": 20,
            }
        }
    )

    @property
    def offset(self) -> int:
        """
        Calculate SQL OFFSET from page number.

        Example:
            >>> PaginationParams(page=2, page_size=20).offset
            20
        """
        return (self.page - 1) * self.page_size

    @staticmethod
    def calculate_total_pages(total: int, page_size: int) -> int:
        """
        Calculate total pages from total count.

        Example:
            >>> PaginationParams.calculate_total_pages(95, 20)
            5
            >>> PaginationParams.calculate_total_pages(0, 20)
            0
        """
        return (total + page_size - 1) // page_size if total > 0 else 0


class PaginationMeta(BaseModel):
    """
    Metadata for paginated responses.

    Attributes:
        total: Total number of items across all pages
        page: Current page number
        page_size: Number of items per page
        total_pages: Total number of pages
    """

    total: int = Field(description="Total number of items")
    page: int = Field(description="Current page number")
    page_size: int = Field(description="Number of items per page")
    total_pages: int = Field(description="Total number of pages")


class PaginatedResponse(BaseModel, Generic[DataT]):
    """
    Generic paginated payload.

    Attributes:
        data: List of items for current page
        meta: Pagination metadata
    """

    data: list[DataT]
    meta: PaginationMeta

    @classmethod
    def build(
        cls, items: list[Any], total: int, pagination: PaginationParams
    ) -> "PaginatedResponse":
        return cls(
            data=items,
            meta=PaginationMeta(
                total=total,
                page=pagination.page,
                page_size=pagination.page_size,
                total_pages=PaginationParams.calculate_total_pages(
                    total, pagination.page_size
                ),
            ),
        )
