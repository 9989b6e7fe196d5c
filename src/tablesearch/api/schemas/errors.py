"""Error response schemas for API."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Request errors
    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"

    # Data source errors
    DATASOURCE_ERROR = "datasource_error"

    # System errors
    CONFIGURATION_ERROR = "configuration_error"
    INTERNAL_ERROR = "internal_error"


class APIError(BaseModel):
    """Standardized API error response format.

    List endpoints of the record-management application answer failures
    with ``{"error": ..., "details": ...}``; the remaining fields are
    additive.
    """

    success: bool = Field(default=False, description="Always false for errors")
    error: str = Field(..., description="Human-readable error message")
    error_code: str = Field(..., description="Machine-readable error code")
    details: Any = Field(default=None, description="Additional error context")
    request_id: str | None = Field(default=None, description="Request ID for tracing")
    timestamp: datetime = Field(..., description="When the error occurred")

    model_config = {"json_schema_extra": {"example": {
        "success": False,
        "error": "Failed to fetch divisions",
        "error_code": "datasource_error",
        "details": "DataSourceError(fetch_page divisions): connection refused",
        "request_id": "5f0c6f0e9a3c4c1b8f7f0f9d2b1e4a77",
        "timestamp": "2026-01-30T12:00:00Z",
    }}}
