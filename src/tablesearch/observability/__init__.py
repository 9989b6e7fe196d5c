"""Observability module for tablesearch."""

from tablesearch.observability.metrics import (
    MetricsConfig,
    get_metrics,
    observe_search,
    record_cache_lookup,
    record_datasource_call,
)

__all__ = [
    "MetricsConfig",
    "get_metrics",
    "observe_search",
    "record_cache_lookup",
    "record_datasource_call",
]
