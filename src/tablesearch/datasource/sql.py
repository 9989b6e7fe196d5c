"""SQLAlchemy Core data source.

Compiles predicate trees to SQL expressions and runs them on an async
engine. Joined columns are selected under ``<alias>__<column>`` labels and
nested back under the alias in returned rows.

Usage:
    from sqlalchemy.ext.asyncio import create_async_engine

    engine = create_async_engine("postgresql+asyncpg://...")
    source = await SqlAlchemyDataSource.reflect(engine, ["divisions", "users"])
    page = await source.fetch_page(request)
"""

import time
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import (
    ColumnElement,
    FromClause,
    MetaData,
    Select,
    Table,
    and_,
    false,
    func,
    join,
    or_,
    select,
    true,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from tablesearch.config.settings import Settings, get_settings
from tablesearch.core.exceptions import DataSourceError
from tablesearch.core.logging import get_logger, log_datasource_call
from tablesearch.observability.metrics import record_datasource_call
from tablesearch.schema.types import JoinKind
from tablesearch.search.predicates import AllOf, AnyOf, Condition, Operator, Predicate
from tablesearch.utils.rows import Row

from .protocol import FetchRequest, Page

logger = get_logger(__name__)

_LABEL_SEPARATOR = "__"


class SqlAlchemyDataSource:
    """Data source reading tables described by a SQLAlchemy ``MetaData``.

    Args:
        engine: Async engine the queries run on
        metadata: Table definitions (declared or reflected)
        settings: Metrics switch (default: ``get_settings()``)
    """

    def __init__(
        self,
        engine: AsyncEngine,
        metadata: MetaData,
        *,
        settings: Settings | None = None,
    ) -> None:
        self._engine = engine
        self._metadata = metadata
        self._settings = settings or get_settings()

    @classmethod
    async def reflect(
        cls,
        engine: AsyncEngine,
        tables: Sequence[str] | None = None,
        *,
        settings: Settings | None = None,
    ) -> "SqlAlchemyDataSource":
        """Build a data source by reflecting table definitions from the database.

        Args:
            engine: Async engine to reflect through
            tables: Table names to reflect (default: all)
            settings: Passed through to the data source

        Raises:
            DataSourceError: If reflection fails
        """
        metadata = MetaData()
        try:
            async with engine.connect() as conn:
                await conn.run_sync(metadata.reflect, only=tables)
        except SQLAlchemyError as exc:
            raise DataSourceError(
                f"Reflection failed: {exc}",
                table=",".join(tables or ["*"]),
                operation="reflect",
            ) from exc
        return cls(engine, metadata, settings=settings)

    async def fetch_page(self, request: FetchRequest) -> Page:
        """Fetch a filtered, sorted and range-limited slice with its total count."""
        stmt, from_clause, where = self._build_select(request, "fetch_page")
        stmt = stmt.offset(request.offset)
        if request.limit is not None:
            stmt = stmt.limit(request.limit)

        count_stmt = select(func.count()).select_from(from_clause)
        if where is not None:
            count_stmt = count_stmt.where(where)

        async with self._operation(request.table, "fetch_page") as conn:
            total = (await conn.execute(count_stmt)).scalar_one()
            result = await conn.execute(stmt)
            rows = [self._nest(mapping, request) for mapping in result.mappings()]

        return Page(rows=rows, total=total)

    async def fetch_all(self, request: FetchRequest) -> list[Row]:
        """Fetch every row matching the predicate, unranged."""
        stmt, _, _ = self._build_select(request, "fetch_all")
        async with self._operation(request.table, "fetch_all") as conn:
            result = await conn.execute(stmt)
            return [self._nest(mapping, request) for mapping in result.mappings()]

    async def lookup(
        self,
        table: str,
        columns: tuple[str, ...],
        predicate: Predicate | None,
    ) -> list[Row]:
        """Fetch plain columns from a table without joins or paging."""
        source = self._table(table, "lookup")
        stmt = select(*(self._column(source, {}, column, "lookup") for column in columns))
        if predicate is not None:
            stmt = stmt.where(self._compile(source, {}, predicate, "lookup"))

        async with self._operation(table, "lookup") as conn:
            result = await conn.execute(stmt)
            return [dict(mapping) for mapping in result.mappings()]

    # =========================================================================
    # Statement building
    # =========================================================================

    def _build_select(
        self,
        request: FetchRequest,
        operation: str,
    ) -> tuple[Select[Any], FromClause, ColumnElement[bool] | None]:
        base = self._table(request.table, operation)
        aliases: dict[str, FromClause] = {}
        from_clause: FromClause = base
        selected: list[ColumnElement[Any]] = [
            self._column(base, aliases, column, operation).label(column)
            for column in request.columns
        ]

        for join_def in request.joins:
            target = self._table(join_def.table, operation).alias(join_def.alias)
            aliases[join_def.alias] = target
            onclause = (
                self._column(base, {}, join_def.local_column, operation)
                == self._column(target, {}, join_def.remote_column, operation)
            )
            match join_def.join_kind:
                case JoinKind.INNER:
                    from_clause = join(from_clause, target, onclause)
                case JoinKind.LEFT:
                    from_clause = join(from_clause, target, onclause, isouter=True)
                case JoinKind.RIGHT:
                    from_clause = join(target, from_clause, onclause, isouter=True)
            selected.extend(
                self._column(target, {}, column, operation).label(
                    f"{join_def.alias}{_LABEL_SEPARATOR}{column}"
                )
                for column in join_def.select_columns
            )

        where = (
            self._compile(base, aliases, request.predicate, operation)
            if request.predicate is not None
            else None
        )

        stmt = select(*selected).select_from(from_clause)
        if where is not None:
            stmt = stmt.where(where)
        for spec in request.order:
            column = self._column(base, aliases, spec.column, operation)
            stmt = stmt.order_by((column.desc() if spec.descending else column.asc()).nulls_last())

        return stmt, from_clause, where

    def _compile(
        self,
        base: FromClause,
        aliases: dict[str, FromClause],
        predicate: Predicate,
        operation: str,
    ) -> ColumnElement[bool]:
        if isinstance(predicate, AllOf):
            if not predicate.items:
                return true()
            return and_(*(self._compile(base, aliases, item, operation) for item in predicate.items))
        if isinstance(predicate, AnyOf):
            if not predicate.items:
                return false()
            return or_(*(self._compile(base, aliases, item, operation) for item in predicate.items))
        return self._compile_condition(base, aliases, predicate, operation)

    def _compile_condition(
        self,
        base: FromClause,
        aliases: dict[str, FromClause],
        condition: Condition,
        operation: str,
    ) -> ColumnElement[bool]:
        column = self._column(base, aliases, condition.column, operation)
        match condition.op:
            case Operator.EQ:
                return column == condition.value
            case Operator.CONTAINS:
                return column.contains(str(condition.value), autoescape=True)
            case Operator.ICONTAINS:
                return column.icontains(str(condition.value), autoescape=True)
            case Operator.GTE:
                return column >= condition.value
            case Operator.LTE:
                return column <= condition.value
            case Operator.IN:
                return column.in_(sorted(condition.value, key=str))
        raise DataSourceError(
            f"Unsupported operator {condition.op!r}", table=base.name, operation=operation
        )

    def _table(self, name: str, operation: str) -> Table:
        table = self._metadata.tables.get(name)
        if table is None:
            raise DataSourceError(f"Unknown table {name!r}", table=name, operation=operation)
        return table

    def _column(
        self,
        base: FromClause,
        aliases: dict[str, FromClause],
        name: str,
        operation: str,
    ) -> ColumnElement[Any]:
        source, column = base, name
        if "." in name:
            alias, column = name.split(".", 1)
            if alias not in aliases:
                raise DataSourceError(
                    f"Unknown join alias {alias!r}", table=base.name, operation=operation
                )
            source = aliases[alias]
        try:
            return source.c[column]
        except KeyError as exc:
            raise DataSourceError(
                f"Unknown column {name!r}", table=base.name, operation=operation
            ) from exc

    @staticmethod
    def _nest(mapping: Any, request: FetchRequest) -> Row:
        row: Row = {column: mapping[column] for column in request.columns}
        for join_def in request.joins:
            nested = {
                column: mapping[f"{join_def.alias}{_LABEL_SEPARATOR}{column}"]
                for column in join_def.select_columns
            }
            row[join_def.alias] = nested if any(v is not None for v in nested.values()) else None
        return row

    # =========================================================================
    # Execution
    # =========================================================================

    @asynccontextmanager
    async def _operation(self, table: str, operation: str) -> AsyncGenerator[AsyncConnection, None]:
        """Yield a connection, timing the call and wrapping driver errors."""
        started = time.perf_counter()
        success = False
        try:
            async with self._engine.connect() as conn:
                yield conn
            success = True
        except SQLAlchemyError as exc:
            raise DataSourceError(str(exc), table=table, operation=operation) from exc
        finally:
            if self._settings.metrics_enabled:
                record_datasource_call(table, operation, success=success)
            log_datasource_call(
                logger,
                operation=operation,
                table=table,
                duration_ms=(time.perf_counter() - started) * 1000,
                success=success,
            )
