"""Builders for the JSON error bodies returned by every exception handler.

Both builders stamp the same metadata (UTC timestamp, request id, path), so a
client can parse any error the API returns with one schema.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from petshop.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from petshop.utils.request_context import get_request_id

__all__ = [
    "build_error_response",
    "build_validation_error_response",
]


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _metadata(path: str, request_id: str | None) -> dict[str, Any]:
    return {
        "timestamp": _current_timestamp(),
        "request_id": request_id or get_request_id(),
        "path": path,
    }


def build_validation_error_response(
    *,
    errors: Sequence[ValidationErrorDetail],
    message: str,
    detail: str,
    status_code: int,
    path: str,
    request_id: str | None = None,
) -> ValidationErrorResponse:
    return ValidationErrorResponse(
        message=message,
        detail=detail,
        status_code=status_code,
        errors=list(errors),
        **_metadata(path, request_id),
    )


def build_error_response(
    *,
    error_type: ErrorType,
    message: str,
    detail: str,
    status_code: int,
    path: str,
    request_id: str | None = None,
) -> ErrorResponse:
    return ErrorResponse(
        error_type=error_type,
        message=message,
        detail=detail,
        status_code=status_code,
        **_metadata(path, request_id),
    )
