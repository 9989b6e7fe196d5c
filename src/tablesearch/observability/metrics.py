"""Prometheus metrics for tablesearch observability.

This module provides Prometheus metrics for monitoring:
- Searches (count and latency per table and execution path)
- Data source calls (count per table, operation and outcome)
- Read-through cache hits and misses
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, generate_latest

__all__ = [
    "MetricsConfig",
    "SEARCH_COUNT",
    "SEARCH_DURATION",
    "SEARCH_RESULT_ROWS",
    "DATASOURCE_CALL_COUNT",
    "CACHE_LOOKUPS",
    "get_metrics",
    "observe_search",
    "record_cache_lookup",
    "record_datasource_call",
]


@dataclass
class MetricsConfig:
    """Configuration for Prometheus metric names.

    Whether metrics are recorded at all is ``Settings.metrics_enabled``;
    callers check it before calling the helpers below.

    Attributes:
        prefix: Prefix for all metric names.
    """

    prefix: str = "tablesearch"

    @classmethod
    def from_env(cls) -> MetricsConfig:
        """Create configuration from environment variables."""
        return cls(
            prefix=os.getenv("METRICS_PREFIX", "tablesearch"),
        )


_config = MetricsConfig.from_env()

# ============================================================================
# Search Metrics
# ============================================================================

SEARCH_COUNT = Counter(
    f"{_config.prefix}_searches_total",
    "Total number of searches executed",
    ["table", "path", "status"],
)

SEARCH_DURATION = Histogram(
    f"{_config.prefix}_search_duration_seconds",
    "Time to execute one search including foreign-key lookups",
    ["table", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

SEARCH_RESULT_ROWS = Histogram(
    f"{_config.prefix}_search_matching_rows",
    "Rows matching the search predicate",
    ["table", "path"],
    buckets=(0, 1, 10, 50, 100, 500, 1000, 5000, 10000, 50000),
)

# ============================================================================
# Data Source Metrics
# ============================================================================

DATASOURCE_CALL_COUNT = Counter(
    f"{_config.prefix}_datasource_calls_total",
    "Total number of data source calls",
    ["table", "operation", "status"],
)

CACHE_LOOKUPS = Counter(
    f"{_config.prefix}_cache_lookups_total",
    "Read-through cache lookups",
    ["table", "result"],
)


def observe_search(
    table: str,
    path: str,
    duration_seconds: float,
    total_count: int,
    success: bool = True,
) -> None:
    """Record one completed (or failed) search.

    Args:
        table: Primary table searched.
        path: Execution path ("direct" or "materialize").
        duration_seconds: Wall time of the search.
        total_count: Rows matching the predicate.
        success: Whether the search returned a result.
    """
    SEARCH_COUNT.labels(table=table, path=path, status="success" if success else "error").inc()
    SEARCH_DURATION.labels(table=table, path=path).observe(duration_seconds)
    if success:
        SEARCH_RESULT_ROWS.labels(table=table, path=path).observe(total_count)


def record_datasource_call(table: str, operation: str, success: bool) -> None:
    """Record a data source call.

    Args:
        table: Table the call read.
        operation: Data source operation name.
        success: Whether the call succeeded.
    """
    DATASOURCE_CALL_COUNT.labels(
        table=table, operation=operation, status="success" if success else "error"
    ).inc()


def record_cache_lookup(table: str, hit: bool) -> None:
    """Record a read-through cache lookup.

    Args:
        table: Table the cached search belongs to.
        hit: Whether a fresh entry was found.
    """
    CACHE_LOOKUPS.labels(table=table, result="hit" if hit else "miss").inc()


def get_metrics(registry: CollectorRegistry = REGISTRY) -> bytes:
    """Render metrics in the Prometheus exposition format."""
    return generate_latest(registry)
