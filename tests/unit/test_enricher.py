"""Unit tests for aggregate enrichment and in-memory sorting."""

import pytest

from tablesearch.datasource import InMemoryDataSource
from tablesearch.schema import DIVISIONS_CONFIG, USERS_CONFIG, SortDirection
from tablesearch.search.enricher import RowEnricher, sort_rows


class CountingSource(InMemoryDataSource):
    """In-memory source that counts lookups."""

    def __init__(self, tables):
        super().__init__(tables)
        self.lookup_calls = 0

    async def lookup(self, table, columns, predicate):
        self.lookup_calls += 1
        return await super().lookup(table, columns, predicate)


@pytest.mark.asyncio
class TestEnrich:
    """Tests for aggregate computation."""

    async def test_counts_related_rows(self, memory_source: InMemoryDataSource):
        """Test each row gets the number of users pointing at it."""
        rows = [{"division_id": key} for key in (1, 2, 3, 4, 5)]

        enriched = await RowEnricher(DIVISIONS_CONFIG, memory_source).enrich(rows)

        assert [row["total_users"] for row in enriched] == [2, 1, 0, 1, 0]

    async def test_does_not_mutate_input(self, memory_source: InMemoryDataSource):
        """Test enrichment returns new row dictionaries."""
        rows = [{"division_id": 1}]

        await RowEnricher(DIVISIONS_CONFIG, memory_source).enrich(rows)

        assert rows == [{"division_id": 1}]

    async def test_one_lookup_per_aggregate(self, memory_source: InMemoryDataSource):
        """Test aggregates are computed with a single IN lookup."""
        source = CountingSource(
            {"users": await memory_source.lookup("users", ("user_id", "division_id"), None)}
        )
        rows = [{"division_id": key} for key in range(1, 50)]

        await RowEnricher(DIVISIONS_CONFIG, source).enrich(rows)

        assert source.lookup_calls == 1

    async def test_empty_rows_skip_lookup(self):
        """Test nothing is looked up for an empty page."""
        source = CountingSource({})

        assert await RowEnricher(DIVISIONS_CONFIG, source).enrich([]) == []
        assert source.lookup_calls == 0

    async def test_config_without_aggregates(self):
        """Test rows pass through untouched without aggregates."""
        source = CountingSource({})
        rows = [{"user_id": 1}]

        assert await RowEnricher(USERS_CONFIG, source).enrich(rows) is rows
        assert source.lookup_calls == 0


class TestSort:
    """Tests for materialize-path sorting."""

    ROWS = [
        {"division_id": 1, "name": "north", "manager": {"username": "bob"}},
        {"division_id": 2, "name": "East", "manager": None},
        {"division_id": 3, "name": "alpha", "manager": {"username": "Alice"}},
        {"division_id": 4, "name": "North", "manager": {"username": "alice"}},
    ]

    def sort(self, field: str, direction: SortDirection) -> list[int]:
        enricher = RowEnricher(DIVISIONS_CONFIG, InMemoryDataSource())
        return [row["division_id"] for row in enricher.sort(self.ROWS, field, direction)]

    def test_case_insensitive_ascending(self):
        """Test strings compare case-insensitively with pk tie-break."""
        assert self.sort("name", SortDirection.ASC) == [3, 2, 1, 4]

    def test_descending_keeps_pk_ascending_tie_break(self):
        """Test equal keys stay in primary key order when descending."""
        assert self.sort("name", SortDirection.DESC) == [1, 4, 2, 3]

    def test_missing_values_last_both_directions(self):
        """Test rows without a joined value sort last either way."""
        assert self.sort("manager.username", SortDirection.ASC) == [3, 4, 1, 2]
        assert self.sort("manager.username", SortDirection.DESC) == [1, 3, 4, 2]


def test_sort_rows_is_stable_without_casefold():
    """Test sort_rows compares raw values unless casefold is set."""
    rows = [{"k": "b"}, {"k": "B"}, {"k": "a"}]

    assert [row["k"] for row in sort_rows(rows, [("k", False)])] == ["B", "a", "b"]
    assert [row["k"] for row in sort_rows(rows, [("k", False)], casefold=True)] == ["a", "b", "B"]
