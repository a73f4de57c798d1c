"""Error response schemas for consistent error handling."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ErrorType(str, Enum):
    """Types of errors that can occur."""

    VALIDATION_ERROR = "validation_error"
    INVALID_PRODUCT = "invalid_product"
    INTERNAL_ERROR = "internal_error"


class ErrorResponse(BaseModel):
    """Standardized error response model."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "invalid_product",
                "message": "Invalid product identifier",
                "detail": "Product identifiers must be non-empty strings",
                "status_code": 422,
                "timestamp": "2025-11-03T10:30:00Z",
                "request_id": "0b6f4c1e-5d0e-4a43-9a59-2d1c1d3f9b7e",
                "path": "/wishlist/%20",
                "retry_after": None,
            }
        }
    )

    error_type: ErrorType = Field(..., description="Category of error")
    message: str = Field(..., description="Human-readable error message")
    detail: str | None = Field(None, description="Additional error details or context")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: datetime = Field(default_factory=_utcnow, description="When error occurred")
    request_id: str | None = Field(None, description="Unique request identifier for tracking")
    path: str | None = Field(None, description="Request path that caused the error")
    retry_after: int | None = Field(
        None, description="Seconds to wait before retrying (for transient failures)"
    )


class ValidationErrorDetail(BaseModel):
    """Details for validation errors."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
    value: Any = Field(None, description="Value that failed validation")


class ValidationErrorResponse(ErrorResponse):
    """Extended error response for validation errors."""

    error_type: ErrorType = Field(default=ErrorType.VALIDATION_ERROR)
    errors: list[ValidationErrorDetail] = Field(
        default_factory=list, description="List of validation errors"
    )


class InvalidProductErrorResponse(ErrorResponse):
    """Error response for product identifiers the wishlist store rejected."""

    error_type: ErrorType = Field(default=ErrorType.INVALID_PRODUCT)
    product_id: str | None = Field(None, description="Identifier as sent by the client")
