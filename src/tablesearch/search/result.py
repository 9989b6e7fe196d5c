"""Search result containers."""

import math
from dataclasses import dataclass
from typing import Any

from tablesearch.schema.types import SortDirection, SortPath


@dataclass(frozen=True)
class Pagination:
    """Offset pagination metadata for one page of results."""

    page: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        if self.total_count <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the response envelope's key names."""
        return {
            "currentPage": self.page,
            "totalPages": self.total_pages,
            "totalCount": self.total_count,
            "limit": self.page_size,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


@dataclass(frozen=True)
class SortState:
    """The sort actually applied, echoed back to the caller."""

    field: str
    direction: SortDirection


@dataclass(frozen=True)
class SearchResult:
    """One page of search results.

    Attributes:
        rows: Result rows; joined columns are nested under their alias
        pagination: Page position and totals
        sort: Effective sort field and direction
        path: Execution path used to produce the page
        search: The trimmed search term, or None when no term was given
        status_filter: The status filter applied, or None
    """

    rows: list[dict[str, Any]]
    pagination: Pagination
    sort: SortState
    path: SortPath = SortPath.DIRECT
    search: str | None = None
    status_filter: str | None = None

    @property
    def total_count(self) -> int:
        return self.pagination.total_count

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the ``data/pagination/filters/sorting`` envelope."""
        return {
            "data": self.rows,
            "pagination": self.pagination.to_dict(),
            "filters": {"search": self.search, "status": self.status_filter},
            "sorting": {"field": self.sort.field, "direction": self.sort.direction.value},
        }
