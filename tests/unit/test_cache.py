"""Unit tests for the read-through search cache."""

import pytest
from prometheus_client import REGISTRY

from tablesearch.config.settings import Settings
from tablesearch.core.exceptions import DataSourceError
from tablesearch.datasource import FetchRequest, InMemoryDataSource, Page
from tablesearch.schema import DIVISIONS_CONFIG
from tablesearch.search.cache import CachedSearchEngine
from tablesearch.search.engine import SearchEngine


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class CountingSource(InMemoryDataSource):
    """In-memory source counting page reads, optionally failing them."""

    def __init__(self, tables, fail: bool = False):
        super().__init__(tables)
        self.page_reads = 0
        self.fail = fail

    async def fetch_page(self, request: FetchRequest) -> Page:
        self.page_reads += 1
        if self.fail:
            raise DataSourceError("down", table=request.table, operation="fetch_page")
        return await super().fetch_page(request)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def source() -> CountingSource:
    return CountingSource(
        {
            "divisions": [
                {"division_id": 1, "name": "North", "status": "Active", "created_at": None},
                {"division_id": 2, "name": "South", "status": "Inactive", "created_at": None},
            ],
            "users": [],
        }
    )


@pytest.fixture
def cached(source: CountingSource, test_settings: Settings, clock: FakeClock) -> CachedSearchEngine:
    engine = SearchEngine(DIVISIONS_CONFIG, source, settings=test_settings)
    return CachedSearchEngine(engine, clock=clock)


@pytest.mark.asyncio
class TestCachedSearchEngine:
    """Tests for CachedSearchEngine."""

    async def test_repeat_is_served_from_cache(self, cached: CachedSearchEngine, source):
        """Test an identical search does not reach the data source twice."""
        first = await cached.search("north")
        second = await cached.search("north")

        assert first is second
        assert source.page_reads == 1
        assert len(cached) == 1

    async def test_normalized_arguments_share_entries(self, cached: CachedSearchEngine, source):
        """Test equivalent arguments map to one entry."""
        await cached.search(" north ", page=0, sort_direction="DESC")
        await cached.search("north", page=1, sort_direction="desc")

        assert source.page_reads == 1

    async def test_different_arguments_miss(self, cached: CachedSearchEngine, source):
        """Test any differing argument is a separate entry."""
        await cached.search("north")
        await cached.search("north", page=2)
        await cached.search("north", status_filter="Active")

        assert source.page_reads == 3

    async def test_entries_expire(self, cached: CachedSearchEngine, source, clock: FakeClock):
        """Test entries older than the TTL are refreshed."""
        await cached.search("north")
        clock.now += 31.0
        await cached.search("north")

        assert source.page_reads == 2

    async def test_invalidate(self, cached: CachedSearchEngine, source):
        """Test invalidation drops every entry."""
        await cached.search("north")
        await cached.search("south")

        assert cached.invalidate() == 2
        assert len(cached) == 0

        await cached.search("north")
        assert source.page_reads == 3

    async def test_sees_writes_after_invalidate(self, cached: CachedSearchEngine, source):
        """Test fresh data is visible once the cache is invalidated."""
        before = await cached.search("")
        source.insert(
            "divisions",
            {"division_id": 3, "name": "East", "status": "Active", "created_at": None},
        )

        stale = await cached.search("")
        cached.invalidate()
        fresh = await cached.search("")

        assert stale.total_count == before.total_count == 2
        assert fresh.total_count == 3

    async def test_failures_not_cached(self, test_settings: Settings, clock: FakeClock):
        """Test a failed search is retried on the next call."""
        failing = CountingSource({}, fail=True)
        cached = CachedSearchEngine(
            SearchEngine(DIVISIONS_CONFIG, failing, settings=test_settings), clock=clock
        )

        for _ in range(2):
            with pytest.raises(DataSourceError):
                await cached.search("")

        assert failing.page_reads == 2
        assert len(cached) == 0

    async def test_zero_ttl_disables_storage(self, source, test_settings: Settings):
        """Test a TTL of zero never stores results."""
        cached = CachedSearchEngine(
            SearchEngine(DIVISIONS_CONFIG, source, settings=test_settings), ttl_seconds=0
        )

        await cached.search("north")
        await cached.search("north")

        assert source.page_reads == 2

    async def test_expired_entries_leave_the_cache(self, source, test_settings: Settings, clock):
        """Test distinct searches do not accumulate once their TTL has passed."""
        cached = CachedSearchEngine(
            SearchEngine(DIVISIONS_CONFIG, source, settings=test_settings),
            ttl_seconds=1,
            clock=clock,
        )

        for i in range(20):
            await cached.search(f"term{i}")
            clock.now += 10.0

        assert len(cached) == 0

        await cached.search("north")
        assert len(cached) == 1

    async def test_maxsize_bounds_entries(self, source, test_settings: Settings, clock):
        """Test the least recently used entry is dropped at maxsize."""
        cached = CachedSearchEngine(
            SearchEngine(DIVISIONS_CONFIG, source, settings=test_settings),
            maxsize=3,
            clock=clock,
        )

        for term in ("a", "b", "c", "d", "e"):
            await cached.search(term)

        assert len(cached) == 3

        await cached.search("a")
        assert source.page_reads == 6

    async def test_maxsize_defaults_to_settings(self, source, clock):
        """Test the entry bound comes from settings when not given."""
        settings = Settings(
            DATABASE_URL="sqlite+aiosqlite:///:memory:",
            ENVIRONMENT="test",
            search_cache_maxsize=2,
        )
        cached = CachedSearchEngine(
            SearchEngine(DIVISIONS_CONFIG, source, settings=settings), clock=clock
        )

        for term in ("a", "b", "c"):
            await cached.search(term)

        assert len(cached) == 2

    async def test_metrics_disabled_records_nothing(self, source, clock):
        """Test lookups and searches are not counted when metrics are off."""
        settings = Settings(
            DATABASE_URL="sqlite+aiosqlite:///:memory:",
            ENVIRONMENT="test",
            metrics_enabled=False,
        )
        cached = CachedSearchEngine(
            SearchEngine(DIVISIONS_CONFIG, source, settings=settings), clock=clock
        )
        lookups = {"table": "divisions", "result": "miss"}
        searches = {"table": "divisions", "path": "direct", "status": "success"}
        lookups_before = REGISTRY.get_sample_value("tablesearch_cache_lookups_total", lookups)
        searches_before = REGISTRY.get_sample_value("tablesearch_searches_total", searches)

        await cached.search("north")

        assert REGISTRY.get_sample_value("tablesearch_cache_lookups_total", lookups) == (
            lookups_before
        )
        assert REGISTRY.get_sample_value("tablesearch_searches_total", searches) == (
            searches_before
        )
