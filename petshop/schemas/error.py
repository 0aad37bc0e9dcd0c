"""Error payloads shared by every endpoint."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    """Machine readable error category; the HTTP status is derived from it."""

    VALIDATION_ERROR = "validation_error"
    AUTHENTICATION_ERROR = "authentication_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    NOT_PRESENT = "not_present"
    STORAGE_ERROR = "storage_error"
    INTERNAL_ERROR = "internal_error"


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "conflict",
                "message": "Product already in favorites",
                "detail": "Product 7 is already in the favorites of user 42",
                "status_code": 409,
                "timestamp": "2026-03-14T08:15:00Z",
                "request_id": "0b9c6f1e5d3a4c7f8e2d1a6b5c4d3e2f",
                "path": "/api/v1/favorites",
            }
        }
    )

    error_type: ErrorType
    message: str = Field(..., description="Short summary of the failure")
    detail: str | None = Field(None, description="Specifics, e.g. the offending ids")
    status_code: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str | None = Field(None, description="Echo of the X-Request-ID header")
    path: str | None = None


class ValidationErrorDetail(BaseModel):
    """One rejected input field."""

    field: str = Field(..., description="Dotted location, e.g. ``body.quantity``")
    message: str
    value: Any = None


class ValidationErrorResponse(ErrorResponse):
    """422 body listing each rejected field."""

    error_type: ErrorType = ErrorType.VALIDATION_ERROR
    errors: list[ValidationErrorDetail] = Field(default_factory=list)
