"""Configuration module for tablesearch."""

from tablesearch.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
