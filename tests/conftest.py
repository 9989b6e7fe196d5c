"""Pytest fixtures for tablesearch tests."""

import logging
from collections.abc import AsyncGenerator
from datetime import date, datetime
from pathlib import Path

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy import Column, DateTime, ForeignKey, Integer, MetaData, String, Table, insert
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from tablesearch.config.settings import Settings
from tablesearch.datasource.memory import InMemoryDataSource
from tablesearch.datasource.sql import SqlAlchemyDataSource
from tablesearch.schema.presets import DIVISIONS_CONFIG
from tablesearch.search.engine import SearchEngine

# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog or root logger state
    don't affect other tests.
    """
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


# =============================================================================
# Sample Data
# =============================================================================

# Fixed "today" so bare month terms resolve to 2024
TODAY = date(2024, 6, 1)


def _user(user_id, username, abbreviation, division_id):
    return {
        "user_id": user_id,
        "username": username,
        "user_abbreviation": abbreviation,
        "avatar_url": None,
        "division_id": division_id,
    }


USERS = [
    _user(1, "alice", "AL", 1),
    _user(2, "bob", "BB", 1),
    _user(3, "carl.inactive", "CI", 2),
    _user(4, "Dana", "DN", 4),
    _user(5, "erin", "ER", None),
]

DIVISIONS = [
    {
        "division_id": 1,
        "name": "North",
        "abbreviation": "NOR",
        "status": "Active",
        "created_at": datetime(2024, 1, 10, 9, 0),
        "manager_user_id": 1,
        "created_by": 2,
    },
    {
        "division_id": 2,
        "name": "South",
        "abbreviation": "STH",
        "status": "Inactive",
        "created_at": datetime(2024, 2, 15, 14, 30),
        "manager_user_id": 2,
        "created_by": 1,
    },
    {
        "division_id": 3,
        "name": "Proactive Labs",
        "abbreviation": "PAL",
        "status": "Inactive",
        "created_at": datetime(2024, 3, 1, 0, 0),
        "manager_user_id": None,
        "created_by": 1,
    },
    {
        "division_id": 4,
        "name": "East",
        "abbreviation": "EST",
        "status": "Active",
        "created_at": datetime(2024, 3, 1, 12, 0),
        "manager_user_id": 3,
        "created_by": 2,
    },
    {
        "division_id": 5,
        "name": "West",
        "abbreviation": "WST",
        "status": "Active",
        "created_at": datetime(2023, 12, 31, 18, 0),
        "manager_user_id": 1,
        "created_by": None,
    },
]


# =============================================================================
# Settings and Engines
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create settings for testing."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        ENVIRONMENT="test",
        DEBUG=True,
        log_level="DEBUG",
        search_default_page_size=10,
        search_max_page_size=100,
        search_cache_ttl_seconds=30.0,
    )


@pytest.fixture
def today() -> date:
    """Fixed date used to resolve month-name terms."""
    return TODAY


@pytest.fixture
def memory_source() -> InMemoryDataSource:
    """In-memory data source holding the sample divisions and users."""
    return InMemoryDataSource({"divisions": DIVISIONS, "users": USERS})


@pytest.fixture
def divisions_engine(memory_source: InMemoryDataSource, test_settings: Settings) -> SearchEngine:
    """Search engine over the in-memory divisions table."""
    return SearchEngine(DIVISIONS_CONFIG, memory_source, settings=test_settings, today=TODAY)


# =============================================================================
# Database Fixtures
# =============================================================================


def build_metadata() -> MetaData:
    """Table definitions matching the sample data."""
    metadata = MetaData()
    Table(
        "divisions",
        metadata,
        Column("division_id", Integer, primary_key=True),
        Column("name", String(100), nullable=False),
        Column("abbreviation", String(10)),
        Column("status", String(20), nullable=False),
        Column("created_at", DateTime, nullable=False),
        Column("manager_user_id", Integer, ForeignKey("users.user_id")),
        Column("created_by", Integer, ForeignKey("users.user_id")),
    )
    Table(
        "users",
        metadata,
        Column("user_id", Integer, primary_key=True),
        Column("username", String(100), nullable=False),
        Column("user_abbreviation", String(10)),
        Column("avatar_url", String(255)),
        Column("division_id", Integer),
    )
    return metadata


@pytest_asyncio.fixture
async def sql_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine loaded with the sample data."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'search.db'}", echo=False)
    metadata = build_metadata()

    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        await conn.execute(insert(metadata.tables["users"]), USERS)
        await conn.execute(insert(metadata.tables["divisions"]), DIVISIONS)

    yield engine

    await engine.dispose()


@pytest.fixture
def sql_source(sql_engine: AsyncEngine, test_settings: Settings) -> SqlAlchemyDataSource:
    """SQLAlchemy data source over the sample database."""
    return SqlAlchemyDataSource(sql_engine, build_metadata(), settings=test_settings)


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def test_app(divisions_engine: SearchEngine, test_settings: Settings) -> FastAPI:
    """Create a FastAPI test application serving the in-memory engine."""
    from tablesearch.api.app import create_app

    return create_app(settings=test_settings, engines={"divisions": divisions_engine})


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing.

    Provides an httpx.AsyncClient configured to call the test application
    directly without network overhead.
    """
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as client:
        yield client
