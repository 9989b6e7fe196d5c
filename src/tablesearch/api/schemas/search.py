"""API schemas for table search endpoints.

The envelope keeps the camelCase keys the record-management front end
already consumes (``currentPage``, ``hasNext`` ...).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tablesearch.schema.types import SortDirection
from tablesearch.search.result import SearchResult


class PaginationInfo(BaseModel):
    """Pagination block of a list response."""

    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(..., alias="currentPage", ge=1)
    total_pages: int = Field(..., alias="totalPages", ge=0)
    total_count: int = Field(..., alias="totalCount", ge=0)
    limit: int = Field(..., ge=1)
    has_next: bool = Field(..., alias="hasNext")
    has_prev: bool = Field(..., alias="hasPrev")


class FilterInfo(BaseModel):
    """Filters echoed back to the caller."""

    search: str | None = None
    status: str | None = None


class SortInfo(BaseModel):
    """Effective sort echoed back to the caller."""

    field: str
    direction: SortDirection


class SearchResponse(BaseModel):
    """Paginated list response."""

    success: bool = True
    data: list[dict[str, Any]] = Field(default_factory=list)
    pagination: PaginationInfo
    filters: FilterInfo
    sorting: SortInfo

    model_config = {"json_schema_extra": {"example": {
        "success": True,
        "data": [
            {
                "division_id": 7,
                "name": "North",
                "status": "Active",
                "manager": {"user_id": 3, "username": "jdoe"},
                "total_users": 12,
            }
        ],
        "pagination": {
            "currentPage": 1,
            "totalPages": 3,
            "totalCount": 25,
            "limit": 10,
            "hasNext": True,
            "hasPrev": False,
        },
        "filters": {"search": "north", "status": None},
        "sorting": {"field": "created_at", "direction": "desc"},
    }}}


def search_response_from_result(result: SearchResult) -> SearchResponse:
    """Convert a SearchResult to the API envelope."""
    pagination = result.pagination
    return SearchResponse(
        data=result.rows,
        pagination=PaginationInfo(
            current_page=pagination.page,
            total_pages=pagination.total_pages,
            total_count=pagination.total_count,
            limit=pagination.page_size,
            has_next=pagination.has_next,
            has_prev=pagination.has_prev,
        ),
        filters=FilterInfo(search=result.search, status=result.status_filter),
        sorting=SortInfo(field=result.sort.field, direction=result.sort.direction),
    )
