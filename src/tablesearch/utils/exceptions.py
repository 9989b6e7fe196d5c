"""Base exception for tablesearch."""


class TableSearchError(Exception):
    """Base exception for all tablesearch errors."""

    pass
