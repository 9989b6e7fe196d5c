"""Configuration-driven search executor.

``SearchEngine`` turns a free-text term, a status filter, a sort request
and a page position into one page of rows for a ``TableConfig``.

Two execution paths exist:

- **direct**: predicate, sort and range are pushed to the data source in
  one ``fetch_page`` call. Used whenever the sort key is a single column.
- **materialize**: every matching row is fetched, enriched with derived
  values, sorted and sliced in memory. Reserved for sort keys that only
  exist after rows are combined (aggregates, declared derived keys).

Usage:
    from tablesearch.schema import DIVISIONS_CONFIG
    from tablesearch.search.engine import SearchEngine

    engine = SearchEngine(DIVISIONS_CONFIG, data_source)
    result = await engine.search("active", page=1, page_size=5)
"""

import time
from datetime import date
from zoneinfo import ZoneInfo

from tablesearch.config.settings import Settings, get_settings
from tablesearch.core.exceptions import DataSourceError, InvalidSearchRequestError
from tablesearch.core.logging import LogContext, get_logger
from tablesearch.datasource.protocol import DataSource, FetchRequest, SortSpec
from tablesearch.observability.metrics import observe_search
from tablesearch.schema.table import TableConfig
from tablesearch.schema.types import SortDirection, SortPath
from tablesearch.search.classifier import ClassifiedTerm, TermClassifier
from tablesearch.search.conditions import build_search_predicate
from tablesearch.search.enricher import RowEnricher
from tablesearch.search.foreign_keys import ForeignKeyResolver
from tablesearch.search.predicates import (
    MATCH_NOTHING,
    Condition,
    Operator,
    Predicate,
    all_of,
    any_of,
)
from tablesearch.search.result import Pagination, SearchResult, SortState
from tablesearch.utils.rows import Row

logger = get_logger(__name__)


class SearchEngine:
    """Executes searches against one table.

    The engine holds no per-call state; one instance can serve concurrent
    searches.

    Args:
        config: The table to search
        data_source: Where rows are read from
        settings: Paging and time zone defaults (default: ``get_settings()``)
        today: Fixed date for resolving month-name terms (default: now)
    """

    def __init__(
        self,
        config: TableConfig,
        data_source: DataSource,
        *,
        settings: Settings | None = None,
        today: date | None = None,
    ) -> None:
        self._config = config
        self._data_source = data_source
        self._settings = settings or get_settings()

        tz = ZoneInfo(self._settings.search_timezone) if self._settings.search_timezone else None
        self._classifier = TermClassifier(config, today=today, tz=tz)
        self._resolver = ForeignKeyResolver(data_source)
        self._enricher = RowEnricher(config, data_source)

    @property
    def config(self) -> TableConfig:
        return self._config

    @property
    def data_source(self) -> DataSource:
        return self._data_source

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def max_page_size(self) -> int:
        """Largest page size this engine will serve."""
        return self._config.max_page_size or self._settings.search_max_page_size

    # =========================================================================
    # Search
    # =========================================================================

    async def search(
        self,
        term: str | None = "",
        page: int = 1,
        page_size: int | None = None,
        status_filter: str | None = None,
        sort_field: str | None = None,
        sort_direction: SortDirection | str | None = None,
    ) -> SearchResult:
        """Run one search and return a complete page.

        Args:
            term: Free-text search term; blank applies no search filter
            page: 1-based page number, clamped to at least 1
            page_size: Rows per page, clamped to ``[1, max_page_size]``
            status_filter: Exact status value ANDed onto the search
            sort_field: Column, ``alias.column`` or aggregate to sort by
            sort_direction: ``"asc"`` or ``"desc"`` (default ``"desc"``)

        Returns:
            The requested page with pagination and the effective sort

        Raises:
            InvalidSearchRequestError: If ``sort_direction`` is not asc/desc
            DataSourceError: If any data source call fails
        """
        page = self.clamp_page(page)
        page_size = self.clamp_page_size(page_size)
        direction = self.resolve_direction(sort_direction)
        effective_field, path = self.resolve_sort(sort_field)

        classified = self._classifier.classify(term or "")
        status_value = self.canonical_status_filter(status_filter)

        with LogContext(table=self._config.table_name, path=path.value):
            logger.info(
                "search_started",
                term=classified.raw_value or None,
                term_kind=classified.kind.value,
                status_filter=status_value,
                sort_field=effective_field,
                sort_direction=direction.value,
                page=page,
                page_size=page_size,
            )
            started = time.perf_counter()
            try:
                predicate = await self.build_predicate(classified, status_value)
                if path is SortPath.MATERIALIZE:
                    rows, total = await self._materialize(
                        predicate, effective_field, direction, page, page_size
                    )
                else:
                    rows, total = await self._direct(
                        predicate, effective_field, direction, page, page_size
                    )
            except DataSourceError as exc:
                duration = time.perf_counter() - started
                logger.error(
                    "search_failed",
                    error=str(exc),
                    operation=exc.operation,
                    duration_ms=round(duration * 1000, 2),
                )
                self._observe(path, duration, 0, success=False)
                raise

            duration = time.perf_counter() - started
            logger.info(
                "search_completed",
                total_count=total,
                returned=len(rows),
                duration_ms=round(duration * 1000, 2),
            )
            self._observe(path, duration, total, success=True)

        return SearchResult(
            rows=rows,
            pagination=Pagination(page=page, page_size=page_size, total_count=total),
            sort=SortState(field=effective_field, direction=direction),
            path=path,
            search=classified.raw_value or None,
            status_filter=status_value,
        )

    async def build_predicate(
        self,
        classified: ClassifiedTerm,
        status_value: str | None = None,
    ) -> Predicate | None:
        """Combine the search term and status filter into one predicate.

        Every field's conditions and every foreign-key match are ORed. A
        non-empty term that no field accepts matches nothing. The status
        filter is ANDed on top.

        Raises:
            DataSourceError: If a foreign-key lookup fails
        """
        search_predicate: Predicate | None = None
        if not classified.is_empty:
            field_predicate = build_search_predicate(self._config.search_fields, classified)
            fk_predicate = await self._resolver.build_predicate(
                self._config.foreign_key_fields, classified.raw_value
            )
            search_predicate = any_of([field_predicate, fk_predicate]) or MATCH_NOTHING

        status_predicate = (
            Condition(self._config.status_column, Operator.EQ, status_value)
            if status_value is not None
            else None
        )
        return all_of([search_predicate, status_predicate])

    # =========================================================================
    # Argument normalization
    # =========================================================================

    @staticmethod
    def clamp_page(page: int | None) -> int:
        """Pages start at 1."""
        return max(1, page or 1)

    def clamp_page_size(self, page_size: int | None) -> int:
        """Apply the default page size and the ``[1, max_page_size]`` bounds."""
        if page_size is None:
            page_size = self._settings.search_default_page_size
        return min(self.max_page_size, max(1, page_size))

    @staticmethod
    def resolve_direction(sort_direction: SortDirection | str | None) -> SortDirection:
        """Parse a sort direction, defaulting to descending.

        Raises:
            InvalidSearchRequestError: If the value is neither asc nor desc
        """
        if sort_direction is None or sort_direction == "":
            return SortDirection.DESC
        if isinstance(sort_direction, SortDirection):
            return sort_direction
        try:
            return SortDirection(sort_direction.strip().lower())
        except ValueError:
            raise InvalidSearchRequestError("sort_direction", sort_direction) from None

    def resolve_sort(self, sort_field: str | None) -> tuple[str, SortPath]:
        """Pick the effective sort field and its execution path.

        Unknown fields fall back to the default sort field.
        """
        default_field = self._config.default_sort_field or self._config.primary_key
        if sort_field:
            path = self._config.resolve_sort_path(sort_field)
            if path is not None:
                return sort_field, path
            logger.warning(
                "unknown_sort_field",
                table=self._config.table_name,
                sort_field=sort_field,
                fallback=default_field,
            )
        return default_field, self._config.resolve_sort_path(default_field) or SortPath.DIRECT

    def canonical_status_filter(self, status_filter: str | None) -> str | None:
        """Trim a status filter and restore the enum's canonical casing."""
        if status_filter is None or not status_filter.strip():
            return None
        value = status_filter.strip()
        status_field = self._config.get_field(self._config.status_column)
        if status_field is not None:
            return status_field.canonical_status(value) or value
        return value

    # =========================================================================
    # Execution paths
    # =========================================================================

    async def _direct(
        self,
        predicate: Predicate | None,
        sort_field: str,
        direction: SortDirection,
        page: int,
        page_size: int,
    ) -> tuple[list[Row], int]:
        order = [SortSpec(sort_field, descending=direction is SortDirection.DESC)]
        if sort_field != self._config.primary_key:
            order.append(SortSpec(self._config.primary_key))

        fetched = await self._data_source.fetch_page(
            FetchRequest(
                table=self._config.table_name,
                columns=self._config.select_columns,
                joins=self._config.joins,
                predicate=predicate,
                order=tuple(order),
                offset=(page - 1) * page_size,
                limit=page_size,
            )
        )
        # Aggregates on this path describe the returned page only
        rows = await self._enricher.enrich(fetched.rows)
        return rows, fetched.total

    async def _materialize(
        self,
        predicate: Predicate | None,
        sort_field: str,
        direction: SortDirection,
        page: int,
        page_size: int,
    ) -> tuple[list[Row], int]:
        fetched = await self._data_source.fetch_all(
            FetchRequest(
                table=self._config.table_name,
                columns=self._config.select_columns,
                joins=self._config.joins,
                predicate=predicate,
            )
        )
        enriched = await self._enricher.enrich(fetched)
        ordered = self._enricher.sort(enriched, sort_field, direction)
        offset = (page - 1) * page_size
        return ordered[offset : offset + page_size], len(ordered)

    def _observe(self, path: SortPath, duration: float, total: int, *, success: bool) -> None:
        if self._settings.metrics_enabled:
            observe_search(self._config.table_name, path.value, duration, total, success=success)
