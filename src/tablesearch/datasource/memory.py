"""In-memory data source.

Evaluates predicate trees against lists of dictionaries. Useful for
tests, fixtures and small reference tables that never touch a database.

Usage:
    source = InMemoryDataSource({
        "divisions": [{"division_id": 1, "name": "North", "status": "Active"}],
    })
    page = await source.fetch_page(FetchRequest(table="divisions", columns=("name",)))
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from tablesearch.core.exceptions import DataSourceError
from tablesearch.schema.table import JoinDefinition
from tablesearch.schema.types import JoinKind
from tablesearch.search.predicates import AllOf, AnyOf, Condition, Operator, Predicate
from tablesearch.utils.rows import Row, resolve_path, sort_rows

from .protocol import FetchRequest, Page


class InMemoryDataSource:
    """Data source backed by Python lists of row dictionaries."""

    def __init__(self, tables: Mapping[str, Iterable[Row]] | None = None) -> None:
        self._tables: dict[str, list[Row]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }

    def replace_table(self, name: str, rows: Iterable[Row]) -> None:
        """Swap the contents of a table."""
        self._tables[name] = [dict(row) for row in rows]

    def insert(self, name: str, row: Row) -> None:
        """Append a row to a table, creating the table if needed."""
        self._tables.setdefault(name, []).append(dict(row))

    async def fetch_page(self, request: FetchRequest) -> Page:
        """Fetch a filtered, sorted and range-limited slice with its total count."""
        rows = self._select(request, "fetch_page")
        end = None if request.limit is None else request.offset + request.limit
        return Page(rows=rows[request.offset : end], total=len(rows))

    async def fetch_all(self, request: FetchRequest) -> list[Row]:
        """Fetch every row matching the predicate, unranged."""
        return self._select(request, "fetch_all")

    async def lookup(
        self,
        table: str,
        columns: tuple[str, ...],
        predicate: Predicate | None,
    ) -> list[Row]:
        """Fetch plain columns from a table without joins or paging."""
        source = self._table(table, "lookup")
        return [
            {column: row.get(column) for column in columns}
            for row in source
            if predicate is None or matches(row, predicate)
        ]

    # =========================================================================
    # Internals
    # =========================================================================

    def _table(self, name: str, operation: str) -> list[Row]:
        try:
            return self._tables[name]
        except KeyError as exc:
            raise DataSourceError(f"Unknown table {name!r}", table=name, operation=operation) from exc

    def _select(self, request: FetchRequest, operation: str) -> list[Row]:
        base = self._table(request.table, operation)
        joined = [(join, self._table(join.table, operation)) for join in request.joins]

        combined: list[Row] = []
        for row in base:
            full = dict(row)
            keep = True
            for join, join_rows in joined:
                match = _find_join_row(row, join, join_rows)
                if match is None and join.join_kind is JoinKind.INNER:
                    keep = False
                    break
                full[join.alias] = _project(match, join.select_columns)
            if keep:
                combined.append(full)

        for join, join_rows in joined:
            if join.join_kind is JoinKind.RIGHT:
                combined.extend(_unmatched_right_rows(base, join, join_rows, request.columns))

        filtered = [
            row for row in combined if request.predicate is None or matches(row, request.predicate)
        ]
        ordered = sort_rows(filtered, [(spec.column, spec.descending) for spec in request.order])

        aliases = [join.alias for join in request.joins]
        return [
            {
                **{column: row.get(column) for column in request.columns},
                **{alias: row.get(alias) for alias in aliases},
            }
            for row in ordered
        ]


def matches(row: Row, predicate: Predicate) -> bool:
    """Evaluate a predicate tree against one row."""
    if isinstance(predicate, AllOf):
        return all(matches(row, item) for item in predicate.items)
    if isinstance(predicate, AnyOf):
        return any(matches(row, item) for item in predicate.items)
    return _matches_condition(row, predicate)


def _matches_condition(row: Row, condition: Condition) -> bool:
    value = resolve_path(row, condition.column)
    match condition.op:
        case Operator.EQ:
            return _equal(value, condition.value)
        case Operator.IN:
            return value in condition.value
        case Operator.CONTAINS:
            return value is not None and str(condition.value) in str(value)
        case Operator.ICONTAINS:
            return value is not None and str(condition.value).lower() in str(value).lower()
        case Operator.GTE:
            left, right = _comparable(value, condition.value)
            return left is not None and left >= right
        case Operator.LTE:
            left, right = _comparable(value, condition.value)
            return left is not None and left <= right
    return False


def _equal(value: Any, expected: Any) -> bool:
    """Equality where a ``Decimal`` term matches the float it was typed as."""
    if isinstance(expected, Decimal) and isinstance(value, float):
        return Decimal(str(value)) == expected
    return value == expected


def _comparable(value: Any, bound: Any) -> tuple[Any, Any]:
    """Coerce stored values so they compare with datetime bounds."""
    if value is None or not isinstance(bound, datetime):
        return value, bound
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None, bound
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, datetime.min.time())
    if not isinstance(value, datetime):
        return None, bound
    if value.tzinfo is None and bound.tzinfo is not None:
        value = value.replace(tzinfo=bound.tzinfo)
    elif value.tzinfo is not None and bound.tzinfo is None:
        value = value.replace(tzinfo=None)
    return value, bound


def _find_join_row(row: Row, join: JoinDefinition, join_rows: list[Row]) -> Row | None:
    key = row.get(join.local_column)
    if key is None:
        return None
    for candidate in join_rows:
        if candidate.get(join.remote_column) == key:
            return candidate
    return None


def _unmatched_right_rows(
    base: list[Row],
    join: JoinDefinition,
    join_rows: list[Row],
    columns: tuple[str, ...],
) -> list[Row]:
    referenced = {row.get(join.local_column) for row in base}
    return [
        {**{column: None for column in columns}, join.alias: _project(candidate, join.select_columns)}
        for candidate in join_rows
        if candidate.get(join.remote_column) not in referenced
    ]


def _project(row: Row | None, columns: tuple[str, ...]) -> Row | None:
    if row is None:
        return None
    return {column: row.get(column) for column in columns}
