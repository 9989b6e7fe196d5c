"""Read-through result cache in front of a search engine.

The engine itself never caches. Applications that want to serve repeated
list requests from memory wrap an engine in ``CachedSearchEngine`` and
call ``invalidate()`` after every write to the underlying tables.

Usage:
    cached = CachedSearchEngine(SearchEngine(DIVISIONS_CONFIG, source))
    result = await cached.search("north", page=1)
    ...
    await repository.update_division(...)
    cached.invalidate()
"""

import time
from collections.abc import Callable
from typing import Any

from cachetools import TTLCache

from tablesearch.core.logging import get_logger
from tablesearch.observability.metrics import record_cache_lookup
from tablesearch.schema.types import SortDirection
from tablesearch.search.engine import SearchEngine
from tablesearch.search.result import SearchResult

logger = get_logger(__name__)

CacheKey = tuple[Any, ...]


class CachedSearchEngine:
    """Serves identical searches from memory until they expire or are invalidated.

    Keys are built from the normalized arguments, so ``page=0`` and
    ``page=1`` share an entry. Entries live in a ``TTLCache``: expired
    entries are evicted, and the least recently used entry makes room once
    ``maxsize`` is reached.

    Args:
        engine: The engine to delegate misses to
        ttl_seconds: Entry lifetime (default: ``Settings.search_cache_ttl_seconds``)
        maxsize: Entry limit (default: ``Settings.search_cache_maxsize``)
        clock: Monotonic time source, used as the cache timer
    """

    def __init__(
        self,
        engine: SearchEngine,
        *,
        ttl_seconds: float | None = None,
        maxsize: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        settings = engine.settings
        self._engine = engine
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.search_cache_ttl_seconds
        self._entries: TTLCache[CacheKey, SearchResult] = TTLCache(
            maxsize=maxsize if maxsize is not None else settings.search_cache_maxsize,
            ttl=max(self._ttl, 0),
            timer=clock,
        )

    @property
    def engine(self) -> SearchEngine:
        return self._engine

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)

    async def search(
        self,
        term: str | None = "",
        page: int = 1,
        page_size: int | None = None,
        status_filter: str | None = None,
        sort_field: str | None = None,
        sort_direction: SortDirection | str | None = None,
    ) -> SearchResult:
        """Return a cached result or run the search and remember it.

        Failed searches are not cached.
        """
        key = self._key(term, page, page_size, status_filter, sort_field, sort_direction)
        table = self._engine.config.table_name
        metered = self._engine.settings.metrics_enabled

        cached = self._entries.get(key)
        if cached is not None:
            if metered:
                record_cache_lookup(table, hit=True)
            return cached

        if metered:
            record_cache_lookup(table, hit=False)
        result = await self._engine.search(
            term,
            page=page,
            page_size=page_size,
            status_filter=status_filter,
            sort_field=sort_field,
            sort_direction=sort_direction,
        )
        if self._ttl > 0:
            self._entries[key] = result
        return result

    def invalidate(self) -> int:
        """Drop every cached result.

        Returns:
            Number of entries removed
        """
        removed = len(self)
        self._entries.clear()
        logger.debug(
            "search_cache_invalidated",
            table=self._engine.config.table_name,
            removed=removed,
        )
        return removed

    def _key(
        self,
        term: str | None,
        page: int,
        page_size: int | None,
        status_filter: str | None,
        sort_field: str | None,
        sort_direction: SortDirection | str | None,
    ) -> CacheKey:
        engine = self._engine
        return (
            (term or "").strip(),
            engine.clamp_page(page),
            engine.clamp_page_size(page_size),
            engine.canonical_status_filter(status_filter),
            sort_field or None,
            engine.resolve_direction(sort_direction),
        )
