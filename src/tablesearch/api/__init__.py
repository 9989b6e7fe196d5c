"""HTTP interface for table search."""

from tablesearch.api.app import create_app

__all__ = ["create_app"]
