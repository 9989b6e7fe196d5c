"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Configuration
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = "development"
    DEBUG: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./tablesearch.db"
    DATABASE_ECHO: bool = False

    # Search Configuration
    search_default_page_size: int = Field(default=10, ge=1)
    """Page size used when the caller does not pass one."""

    search_max_page_size: int = Field(default=100, ge=1)
    """Upper bound applied to every requested page size."""

    search_timezone: str | None = None
    """IANA zone for resolving date search terms; naive datetimes when unset."""

    search_cache_ttl_seconds: float = 30.0
    """Lifetime of entries in the optional read-through result cache."""

    search_cache_maxsize: int = Field(default=1024, ge=1)
    """Most entries the read-through cache holds before evicting the least recently used."""

    # Metrics
    metrics_enabled: bool = True
    """Record Prometheus metrics for searches, data source calls and cache lookups."""


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
