"""Tabular data sources the search engine reads from."""

from tablesearch.datasource.memory import InMemoryDataSource
from tablesearch.datasource.protocol import DataSource, FetchRequest, Page, Row, SortSpec
from tablesearch.datasource.sql import SqlAlchemyDataSource

__all__ = [
    "DataSource",
    "FetchRequest",
    "InMemoryDataSource",
    "Page",
    "Row",
    "SortSpec",
    "SqlAlchemyDataSource",
]
