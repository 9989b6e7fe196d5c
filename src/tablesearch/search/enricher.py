"""Row enrichment for derived values.

Aggregates such as a division's ``total_users`` only exist once rows from
two tables are combined. ``RowEnricher`` adds them to fetched rows and
sorts enriched rows in memory for the materialize path.
"""

from collections import Counter

from tablesearch.datasource.protocol import DataSource
from tablesearch.schema.table import AggregateDefinition, TableConfig
from tablesearch.schema.types import SortDirection
from tablesearch.search.predicates import Condition, Operator
from tablesearch.utils.rows import Row, sort_rows

__all__ = ["RowEnricher", "sort_rows"]


class RowEnricher:
    """Adds aggregate values to rows of one table.

    Args:
        config: Table whose aggregates are computed
        data_source: Source the aggregated tables are read from
    """

    def __init__(self, config: TableConfig, data_source: DataSource) -> None:
        self._config = config
        self._data_source = data_source

    async def enrich(self, rows: list[Row]) -> list[Row]:
        """Return copies of ``rows`` with every aggregate filled in.

        One lookup is issued per aggregate, restricted to the keys of the
        given rows. Rows with no related rows get a count of 0.

        Raises:
            DataSourceError: If a lookup fails
        """
        if not rows or not self._config.aggregates:
            return rows

        keys = frozenset(
            row[self._config.primary_key]
            for row in rows
            if row.get(self._config.primary_key) is not None
        )
        counts = {
            aggregate.name: await self._count(aggregate, keys)
            for aggregate in self._config.aggregates
        }
        return [
            {
                **row,
                **{
                    name: counter.get(row.get(self._config.primary_key), 0)
                    for name, counter in counts.items()
                },
            }
            for row in rows
        ]

    def sort(self, rows: list[Row], sort_field: str, direction: SortDirection) -> list[Row]:
        """Sort enriched rows with the primary key as ascending tie-break.

        Strings compare case-insensitively and missing values sort last.
        """
        keys = [(sort_field, direction is SortDirection.DESC)]
        if sort_field != self._config.primary_key:
            keys.append((self._config.primary_key, False))
        return sort_rows(rows, keys, casefold=True)

    async def _count(self, aggregate: AggregateDefinition, keys: frozenset) -> Counter:
        if not keys:
            return Counter()
        related = await self._data_source.lookup(
            aggregate.table,
            (aggregate.foreign_column,),
            Condition(aggregate.foreign_column, Operator.IN, keys),
        )
        return Counter(row[aggregate.foreign_column] for row in related)
