"""Table search endpoints.

One configuration-driven endpoint serves every registered table:
- GET /{table} - Search, filter, sort and paginate a table
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from tablesearch.api.dependencies import SearchBackend, get_search_engine
from tablesearch.api.schemas.errors import APIError
from tablesearch.api.schemas.search import SearchResponse, search_response_from_result
from tablesearch.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["search"])


@router.get(
    "/{table}",
    response_model=SearchResponse,
    summary="Search a table",
    description="""
    Free-text search across every configured field of a table.

    The term is classified once (number, date, status value or text) and
    matched against each field that accepts that shape; matches from all
    fields are combined with OR. `status` is an exact filter applied on
    top of the search.

    Sorting by a derived value (for example `total_users`) is supported
    and echoed back in `sorting`.
    """,
    responses={
        400: {"model": APIError, "description": "Invalid sort direction"},
        404: {"description": "Unknown table"},
        500: {"model": APIError, "description": "Data source failure"},
    },
)
async def search_table(
    engine: Annotated[SearchBackend, Depends(get_search_engine)],
    page: Annotated[int, Query(description="1-based page number")] = 1,
    limit: Annotated[int | None, Query(description="Rows per page")] = None,
    search: Annotated[str | None, Query(description="Free-text search term")] = None,
    status: Annotated[str | None, Query(description="Exact status filter")] = None,
    sort_field: Annotated[str | None, Query(alias="sortField")] = None,
    sort_direction: Annotated[str | None, Query(alias="sortDirection")] = None,
) -> SearchResponse:
    """Search one table and return a page in the list envelope."""
    result = await engine.search(
        search or "",
        page=page,
        page_size=limit,
        status_filter=status,
        sort_field=sort_field,
        sort_direction=sort_direction,
    )
    return search_response_from_result(result)
