"""Utility modules for tablesearch."""

from tablesearch.utils.exceptions import TableSearchError

__all__ = ["TableSearchError"]
