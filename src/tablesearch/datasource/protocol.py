"""Tabular data source protocol.

The search engine never manages connections, retries or transport. It
issues declarative filter/sort/range requests against a ``DataSource`` and
propagates whatever the source raises.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from tablesearch.schema.table import JoinDefinition
from tablesearch.search.predicates import Predicate

Row = dict[str, Any]


@dataclass(frozen=True)
class SortSpec:
    """One ORDER BY key. ``column`` may be join-qualified (``alias.column``)."""

    column: str
    descending: bool = False


@dataclass(frozen=True)
class FetchRequest:
    """A read against one table and its declared joins.

    Attributes:
        table: Primary table name
        columns: Primary table columns to return
        joins: Joined tables; their columns come back nested under the alias
        predicate: Filter over primary table columns, or None for all rows
        order: Sort keys, most significant first
        offset: Rows to skip (ignored by ``fetch_all``)
        limit: Maximum rows to return (ignored by ``fetch_all``)
    """

    table: str
    columns: tuple[str, ...]
    joins: tuple[JoinDefinition, ...] = ()
    predicate: Predicate | None = None
    order: tuple[SortSpec, ...] = ()
    offset: int = 0
    limit: int | None = None


@dataclass
class Page:
    """Rows of one range request together with the exact matching count."""

    rows: list[Row] = field(default_factory=list)
    total: int = 0


@runtime_checkable
class DataSource(Protocol):
    """Interface every tabular data source must implement.

    Example implementation:
        class RestDataSource:
            async def fetch_page(self, request: FetchRequest) -> Page:
                # Translate request.predicate to the service's filter syntax,
                # ask for an exact count and the requested range
                ...
    """

    async def fetch_page(self, request: FetchRequest) -> Page:
        """Fetch a filtered, sorted and range-limited slice with its total count.

        Returns:
            Page with at most ``request.limit`` rows and the full match count
        """
        ...

    async def fetch_all(self, request: FetchRequest) -> list[Row]:
        """Fetch every row matching the predicate, unranged.

        Returns:
            All matching rows in ``request.order``
        """
        ...

    async def lookup(
        self,
        table: str,
        columns: tuple[str, ...],
        predicate: Predicate | None,
    ) -> list[Row]:
        """Fetch plain columns from a table without joins or paging.

        Used for foreign-key resolution and aggregate enrichment.
        """
        ...
