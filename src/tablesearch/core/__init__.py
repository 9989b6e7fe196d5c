"""Core services and utilities for tablesearch."""

from .exceptions import ConfigurationError, DataSourceError, InvalidSearchRequestError
from .logging import LogContext, get_logger, setup_logging

__all__ = [
    # Exceptions
    "ConfigurationError",
    "DataSourceError",
    "InvalidSearchRequestError",
    # Logging
    "LogContext",
    "get_logger",
    "setup_logging",
]
