"""FastAPI application factory."""

from collections.abc import AsyncGenerator, Iterable, Mapping
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import create_async_engine

from tablesearch.api.dependencies import SearchBackend
from tablesearch.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from tablesearch.api.routers import health_router, search_router
from tablesearch.config.settings import Settings, get_settings
from tablesearch.config.validation import validate_or_raise
from tablesearch.core.logging import get_logger, setup_logging
from tablesearch.datasource.sql import SqlAlchemyDataSource
from tablesearch.schema.presets import PRESET_CONFIGS
from tablesearch.schema.table import TableConfig
from tablesearch.search.cache import CachedSearchEngine
from tablesearch.search.engine import SearchEngine

logger = get_logger("tablesearch.api")


def create_app(
    settings: Settings | None = None,
    engines: Mapping[str, SearchBackend] | None = None,
    *,
    configs: Iterable[TableConfig] | None = None,
    cache: bool = False,
) -> FastAPI:
    """Create and configure the FastAPI application.

    When ``engines`` is given the application serves them as-is (useful
    for testing). Otherwise the lifespan reflects the tables of
    ``configs`` (default: the preset configs) from ``DATABASE_URL`` and
    builds one engine per table.

    Args:
        settings: Optional settings override
        engines: Prebuilt engines keyed by table name
        configs: Table configs to serve when building engines at startup
        cache: Wrap startup-built engines in a read-through cache

    Returns:
        Configured FastAPI application

    Example:
        # Production
        uvicorn tablesearch.api.app:create_app --factory

        # Testing
        app = create_app(engines={"divisions": SearchEngine(DIVISIONS_CONFIG, source)})
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Table Search API",
        description="Configuration-driven search, filtering and pagination",
        version="0.1.0",
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=_lifespan,
    )

    app.state.settings = settings
    app.state.engines = dict(engines) if engines is not None else {}
    app.state.build_engines = engines is None
    app.state.configs = tuple(configs) if configs is not None else tuple(PRESET_CONFIGS.values())
    app.state.cache = cache

    # Last added runs outermost
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.DEBUG)
    app.add_middleware(RequestLoggingMiddleware)

    # Health first so /health and /metrics are not taken as table names
    app.include_router(health_router)
    app.include_router(search_router)

    return app


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging, validate settings and build engines."""
    settings: Settings = app.state.settings
    setup_logging()
    validate_or_raise(settings)
    logger.info("starting_api", environment=settings.ENVIRONMENT)

    db_engine = None
    if app.state.build_engines:
        db_engine = create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        configs: tuple[TableConfig, ...] = app.state.configs
        data_source = await SqlAlchemyDataSource.reflect(
            db_engine, sorted(_tables_of(configs)), settings=settings
        )
        for config in configs:
            engine = SearchEngine(config, data_source, settings=settings)
            app.state.engines[config.table_name] = (
                CachedSearchEngine(engine) if app.state.cache else engine
            )
        logger.info("search_engines_ready", tables=sorted(app.state.engines))

    try:
        yield
    finally:
        logger.info("stopping_api")
        if db_engine is not None:
            await db_engine.dispose()


def _tables_of(configs: Iterable[TableConfig]) -> set[str]:
    """Every table a set of configs reads, including joined and lookup tables."""
    tables: set[str] = set()
    for config in configs:
        tables.add(config.table_name)
        tables.update(join.table for join in config.joins)
        tables.update(aggregate.table for aggregate in config.aggregates)
        tables.update(field.foreign_table for field in config.foreign_key_fields)
    return tables
