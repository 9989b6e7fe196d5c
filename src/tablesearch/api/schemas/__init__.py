"""API schemas for request/response validation."""

from .errors import APIError, ErrorCode
from .health import HealthResponse, HealthStatus
from .search import (
    FilterInfo,
    PaginationInfo,
    SearchResponse,
    SortInfo,
    search_response_from_result,
)

__all__ = [
    # Error schemas
    "APIError",
    "ErrorCode",
    # Health schemas
    "HealthResponse",
    "HealthStatus",
    # Search schemas
    "FilterInfo",
    "PaginationInfo",
    "SearchResponse",
    "SortInfo",
    "search_response_from_result",
]
