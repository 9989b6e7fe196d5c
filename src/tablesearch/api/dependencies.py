"""FastAPI dependencies for API endpoints."""

from collections.abc import Mapping
from typing import Annotated

from fastapi import Depends, HTTPException, Path, Request, status

from tablesearch.search.cache import CachedSearchEngine
from tablesearch.search.engine import SearchEngine

SearchBackend = SearchEngine | CachedSearchEngine

__all__ = [
    "SearchBackend",
    "get_search_engine",
    "get_search_engines",
]


def get_search_engines(request: Request) -> Mapping[str, SearchBackend]:
    """Get the table name to engine mapping built at startup."""
    return getattr(request.app.state, "engines", {})


def get_search_engine(
    table: Annotated[str, Path(description="Table to search")],
    engines: Annotated[Mapping[str, SearchBackend], Depends(get_search_engines)],
) -> SearchBackend:
    """Get the engine for the table named in the path.

    Raises:
        HTTPException: 404 if no engine is registered for the table
    """
    engine = engines.get(table)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown table: {table}",
        )
    return engine
