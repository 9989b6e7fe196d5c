"""Foreign-key search resolution.

A foreign-key field is searched through the table it references: the
term is matched against that table's search columns and the keys of the
matching rows become a local ``IN`` predicate.
"""

import asyncio
from collections.abc import Iterable

from tablesearch.core.logging import get_logger
from tablesearch.datasource.protocol import DataSource
from tablesearch.schema.table import FieldDefinition
from tablesearch.schema.types import FieldType
from tablesearch.search.predicates import Condition, Operator, Predicate, any_of

logger = get_logger(__name__)


class ForeignKeyResolver:
    """Looks up foreign keys whose referenced rows match a search term.

    Args:
        data_source: Source the referenced tables are read from
    """

    def __init__(self, data_source: DataSource) -> None:
        self._data_source = data_source

    async def resolve(self, field: FieldDefinition, term: str) -> frozenset:
        """Find the keys of referenced rows matching ``term``.

        Args:
            field: A FOREIGN_KEY search field
            term: The trimmed raw search term

        Returns:
            Matching key values; empty when nothing matches

        Raises:
            DataSourceError: If the lookup fails
        """
        if field.type is not FieldType.FOREIGN_KEY:
            return frozenset()

        key_column = field.foreign_key_column
        predicate = any_of(
            Condition(column, Operator.ICONTAINS, term) for column in field.search_columns
        )
        rows = await self._data_source.lookup(field.foreign_table, (key_column,), predicate)
        keys = frozenset(row[key_column] for row in rows if row.get(key_column) is not None)

        logger.debug(
            "foreign_keys_resolved",
            field=field.name,
            foreign_table=field.foreign_table,
            matches=len(keys),
        )
        return keys

    async def resolve_all(
        self,
        fields: Iterable[FieldDefinition],
        term: str,
    ) -> dict[str, frozenset]:
        """Resolve every foreign-key field concurrently.

        Returns:
            Mapping of local column name to matching keys

        Raises:
            DataSourceError: The first lookup failure
        """
        fk_fields = [f for f in fields if f.type is FieldType.FOREIGN_KEY]
        if not fk_fields:
            return {}
        results = await asyncio.gather(*(self.resolve(f, term) for f in fk_fields))
        return {f.name: keys for f, keys in zip(fk_fields, results, strict=True)}

    async def build_predicate(
        self,
        fields: Iterable[FieldDefinition],
        term: str,
    ) -> Predicate | None:
        """OR one ``IN`` condition per field that matched any referenced row."""
        resolved = await self.resolve_all(fields, term)
        return any_of(key_condition(column, keys) for column, keys in resolved.items())


def key_condition(column: str, keys: frozenset) -> Condition | None:
    """``column IN keys``, or None when there are no keys."""
    if not keys:
        return None
    return Condition(column, Operator.IN, keys)
