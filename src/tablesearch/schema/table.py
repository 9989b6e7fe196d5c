"""Declarative description of a searchable table.

A ``TableConfig`` is authored once per entity type, validated on
construction and then shared read-only by every search against that
table.

Usage:
    from tablesearch.schema import FieldDefinition, FieldType, TableConfig

    config = TableConfig(
        table_name="divisions",
        primary_key="division_id",
        select_columns=("division_id", "name", "status", "created_at"),
        default_sort_field="created_at",
        search_fields=(
            FieldDefinition(name="name", type=FieldType.TEXT),
            FieldDefinition(
                name="status",
                type=FieldType.STATUS,
                enum_values=("Active", "Inactive"),
            ),
        ),
    )
"""

import re
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tablesearch.core.exceptions import ConfigurationError
from tablesearch.schema.types import FieldType, JoinKind, SortPath

_JOIN_CONDITION = re.compile(r"^\s*(\w+)\.(\w+)\s*=\s*(\w+)\.(\w+)\s*$")


class FieldDefinition(BaseModel):
    """A searchable field and the metadata its type requires."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: FieldType
    label: str | None = None
    case_sensitive: bool = False

    # Status
    enum_values: tuple[str, ...] = ()
    exact_match_keywords: tuple[str, ...] = ()

    # Date
    date_formats: tuple[str, ...] = ()

    # Foreign key
    foreign_table: str | None = None
    foreign_key_column: str | None = None
    search_columns: tuple[str, ...] = ()

    @model_validator(mode="after")
    def validate_type_metadata(self) -> Self:
        """Fail fast on fields missing the metadata their type needs."""
        if self.type is FieldType.FOREIGN_KEY:
            missing = [
                attr
                for attr in ("foreign_table", "foreign_key_column", "search_columns")
                if not getattr(self, attr)
            ]
            if missing:
                raise ConfigurationError(
                    f"Foreign key field requires {', '.join(missing)}",
                    field=self.name,
                )
        if self.type is FieldType.STATUS and not self.enum_values:
            raise ConfigurationError("Status field requires enum_values", field=self.name)
        return self

    @property
    def display_label(self) -> str:
        """Human-readable label, falling back to the column name."""
        return self.label or self.name.replace("_", " ").title()

    def canonical_status(self, term: str) -> str | None:
        """Return the enum value matching ``term`` case-insensitively."""
        lowered = term.lower()
        for value in self.enum_values:
            if value.lower() == lowered:
                return value
        return None

    def is_status_keyword(self, term: str) -> bool:
        """Whether ``term`` is one of this field's exact-match keywords."""
        lowered = term.lower()
        return any(keyword.lower() == lowered for keyword in self.exact_match_keywords)


class JoinDefinition(BaseModel):
    """A related table joined onto the primary table.

    ``join_condition`` has the form ``"<table>.<column> = <alias>.<column>"``
    (either side order).
    """

    model_config = ConfigDict(frozen=True)

    table: str
    alias: str
    join_condition: str
    join_kind: JoinKind = JoinKind.LEFT
    select_columns: tuple[str, ...] = ()

    @model_validator(mode="after")
    def validate_join_condition(self) -> Self:
        """Ensure the join condition can be parsed against this alias."""
        self.columns_for()
        return self

    def columns_for(self) -> tuple[str, str, str]:
        """Parse the join condition.

        Returns:
            ``(base_table, local_column, remote_column)``

        Raises:
            ConfigurationError: If the condition is malformed or never
                references this join's alias
        """
        match = _JOIN_CONDITION.match(self.join_condition)
        if match is None:
            raise ConfigurationError(
                f"Malformed join condition: {self.join_condition!r}",
                field=self.alias,
            )
        left_table, left_col, right_table, right_col = match.groups()
        if right_table == self.alias:
            return left_table, left_col, right_col
        if left_table == self.alias:
            return right_table, right_col, left_col
        raise ConfigurationError(
            f"Join condition {self.join_condition!r} does not reference alias {self.alias!r}",
            field=self.alias,
        )

    @property
    def local_column(self) -> str:
        """Column on the primary table."""
        return self.columns_for()[1]

    @property
    def remote_column(self) -> str:
        """Column on the joined table."""
        return self.columns_for()[2]


class AggregateDefinition(BaseModel):
    """A per-row count of rows in another table pointing at this row.

    Aggregates only exist after rows are combined across tables, so
    sorting by one always takes the materialize path.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    table: str
    foreign_column: str


class TableConfig(BaseModel):
    """Search configuration for one logical table."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    primary_key: str
    select_columns: tuple[str, ...]
    search_fields: tuple[FieldDefinition, ...] = ()
    default_sort_field: str | None = None
    joins: tuple[JoinDefinition, ...] = ()
    aggregates: tuple[AggregateDefinition, ...] = ()
    sort_paths: dict[str, SortPath] = Field(default_factory=dict)
    status_column: str = "status"
    max_page_size: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def validate_consistency(self) -> Self:
        """Cross-check fields, joins, aggregates and sort declarations."""
        if self.primary_key not in self.select_columns:
            raise ConfigurationError(
                "Primary key must be one of select_columns",
                table=self.table_name,
                field=self.primary_key,
            )

        aliases: set[str] = set()
        for join in self.joins:
            if join.alias in aliases:
                raise ConfigurationError(
                    "Duplicate join alias", table=self.table_name, field=join.alias
                )
            aliases.add(join.alias)
            base_table, local_column, _ = join.columns_for()
            if base_table != self.table_name:
                raise ConfigurationError(
                    f"Join {join.alias!r} must be declared against {self.table_name!r}",
                    table=self.table_name,
                    field=join.alias,
                )
            if local_column not in self.select_columns:
                raise ConfigurationError(
                    f"Join column {local_column!r} must be selected",
                    table=self.table_name,
                    field=join.alias,
                )

        aggregate_names = {aggregate.name for aggregate in self.aggregates}
        clashes = aggregate_names & (set(self.select_columns) | aliases)
        if clashes:
            raise ConfigurationError(
                f"Aggregate names collide with columns or aliases: {sorted(clashes)}",
                table=self.table_name,
            )

        if self.default_sort_field is not None and not self.is_column(self.default_sort_field):
            raise ConfigurationError(
                "default_sort_field must be a selected or join-qualified column",
                table=self.table_name,
                field=self.default_sort_field,
            )

        for sort_field, path in self.sort_paths.items():
            if path is SortPath.DIRECT and not self.is_column(sort_field):
                raise ConfigurationError(
                    "Only columns can be sorted on the direct path",
                    table=self.table_name,
                    field=sort_field,
                )
            if not (self.is_column(sort_field) or sort_field in aggregate_names):
                raise ConfigurationError(
                    "Sort field is neither a column nor an aggregate",
                    table=self.table_name,
                    field=sort_field,
                )

        return self

    # =========================================================================
    # Lookups
    # =========================================================================

    @property
    def status_fields(self) -> tuple[FieldDefinition, ...]:
        """Fields of type STATUS, in declaration order."""
        return tuple(f for f in self.search_fields if f.type is FieldType.STATUS)

    @property
    def foreign_key_fields(self) -> tuple[FieldDefinition, ...]:
        """Fields of type FOREIGN_KEY, in declaration order."""
        return tuple(f for f in self.search_fields if f.type is FieldType.FOREIGN_KEY)

    def get_field(self, name: str) -> FieldDefinition | None:
        """Get a search field by column name."""
        for search_field in self.search_fields:
            if search_field.name == name:
                return search_field
        return None

    def get_join(self, alias: str) -> JoinDefinition | None:
        """Get a join by alias."""
        for join in self.joins:
            if join.alias == alias:
                return join
        return None

    def get_aggregate(self, name: str) -> AggregateDefinition | None:
        """Get an aggregate by name."""
        for aggregate in self.aggregates:
            if aggregate.name == name:
                return aggregate
        return None

    def is_column(self, name: str) -> bool:
        """Whether ``name`` is a selected column or an ``alias.column`` of a join."""
        if name in self.select_columns:
            return True
        alias, _, column = name.partition(".")
        join = self.get_join(alias)
        return join is not None and column in join.select_columns

    def resolve_sort_path(self, sort_field: str) -> SortPath | None:
        """Pick the execution path for ``sort_field``.

        Declared ``sort_paths`` win; otherwise columns sort on the direct
        path and aggregates on the materialize path.

        Returns:
            The path, or None when the field cannot be sorted on
        """
        declared = self.sort_paths.get(sort_field)
        if declared is not None:
            return declared
        if self.is_column(sort_field):
            return SortPath.DIRECT
        if self.get_aggregate(sort_field) is not None:
            return SortPath.MATERIALIZE
        return None
