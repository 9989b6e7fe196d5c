"""Startup checks for search settings.

Checks run against a ``Settings`` instance and report ``ValidationResult``s
instead of raising, so every problem is visible at once. The API lifespan
calls ``validate_or_raise`` before any engine is built; warnings are
logged and errors abort startup.

Usage:
    from tablesearch.config.validation import validate_configuration

    for result in validate_configuration(settings):
        print(result)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tablesearch.config.settings import Settings, get_settings
from tablesearch.core.exceptions import ConfigurationError

logger = logging.getLogger("tablesearch.config")


class ValidationSeverity(str, Enum):
    """Severity of configuration validation issues."""

    ERROR = "error"  # Must be fixed, app cannot start
    WARNING = "warning"  # Should be fixed, app can start but may have issues


@dataclass
class ValidationResult:
    """Result of a configuration validation check."""

    field: str
    severity: ValidationSeverity
    message: str
    suggestion: str | None = None

    def __str__(self) -> str:
        prefix = "ERROR" if self.severity == ValidationSeverity.ERROR else "WARNING"
        result = f"[{prefix}] {self.field}: {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result


def validate_configuration(settings: Settings | None = None) -> list[ValidationResult]:
    """Validate application configuration.

    Args:
        settings: Settings to validate (default: global settings)

    Returns:
        List of validation results (empty if all checks pass)
    """
    if settings is None:
        settings = get_settings()

    results: list[ValidationResult] = []

    results.extend(_validate_database(settings))
    results.extend(_validate_search(settings))
    results.extend(_validate_environment(settings))

    return results


def validate_or_raise(settings: Settings | None = None) -> None:
    """Validate configuration and raise if errors found.

    Args:
        settings: Settings to validate

    Raises:
        ConfigurationError: If any validation errors are found
    """
    results = validate_configuration(settings)
    errors = [r for r in results if r.severity == ValidationSeverity.ERROR]

    if errors:
        error_messages = "\n".join(str(e) for e in errors)
        raise ConfigurationError(f"Configuration validation failed:\n{error_messages}")

    warnings = [r for r in results if r.severity == ValidationSeverity.WARNING]
    for warning in warnings:
        logger.warning(str(warning))


# =============================================================================
# Validators
# =============================================================================


def _validate_database(settings: Settings) -> list[ValidationResult]:
    """Validate database configuration."""
    results: list[ValidationResult] = []

    if not settings.DATABASE_URL:
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.ERROR,
                message="Database URL is not configured",
                suggestion="Set DATABASE_URL environment variable",
            )
        )
    elif not settings.DATABASE_URL.startswith(("postgresql", "sqlite")):
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.WARNING,
                message=f"Unexpected database type in URL: {settings.DATABASE_URL[:20]}...",
                suggestion="The SQL data source is tested against PostgreSQL and SQLite",
            )
        )

    return results


def _validate_search(settings: Settings) -> list[ValidationResult]:
    """Validate search paging and date settings."""
    results: list[ValidationResult] = []

    if settings.search_default_page_size > settings.search_max_page_size:
        results.append(
            ValidationResult(
                field="search_default_page_size",
                severity=ValidationSeverity.ERROR,
                message=(
                    f"Default page size {settings.search_default_page_size} exceeds "
                    f"maximum {settings.search_max_page_size}"
                ),
                suggestion="Lower search_default_page_size or raise search_max_page_size",
            )
        )

    if settings.search_max_page_size > 1000:
        results.append(
            ValidationResult(
                field="search_max_page_size",
                severity=ValidationSeverity.WARNING,
                message=f"Maximum page size {settings.search_max_page_size} is very large",
                suggestion="Large pages defeat direct-path pagination; 100 is typical",
            )
        )

    if settings.search_timezone:
        try:
            ZoneInfo(settings.search_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            results.append(
                ValidationResult(
                    field="search_timezone",
                    severity=ValidationSeverity.ERROR,
                    message=f"Unknown time zone: {settings.search_timezone}",
                    suggestion="Use an IANA zone name such as 'UTC' or 'America/Chicago'",
                )
            )

    if settings.search_cache_ttl_seconds < 0:
        results.append(
            ValidationResult(
                field="search_cache_ttl_seconds",
                severity=ValidationSeverity.ERROR,
                message="Cache TTL cannot be negative",
            )
        )

    return results


def _validate_environment(settings: Settings) -> list[ValidationResult]:
    """Validate environment-specific settings."""
    results: list[ValidationResult] = []

    if settings.ENVIRONMENT == "production" and settings.DEBUG:
        results.append(
            ValidationResult(
                field="DEBUG",
                severity=ValidationSeverity.ERROR,
                message="Debug mode must be disabled in production",
                suggestion="Set DEBUG=false for production",
            )
        )

    if settings.ENVIRONMENT == "production" and settings.log_level == "DEBUG":
        results.append(
            ValidationResult(
                field="log_level",
                severity=ValidationSeverity.WARNING,
                message="DEBUG log level in production logs every search term",
                suggestion="Use INFO or WARNING for production",
            )
        )

    return results


def get_configuration_summary(settings: Settings | None = None) -> dict[str, Any]:
    """Get a summary of current configuration (safe for logging).

    Args:
        settings: Settings to summarize

    Returns:
        Dictionary with configuration summary
    """
    if settings is None:
        settings = get_settings()

    return {
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "log_level": settings.log_level,
        "database_configured": bool(settings.DATABASE_URL),
        "search_default_page_size": settings.search_default_page_size,
        "search_max_page_size": settings.search_max_page_size,
        "search_timezone": settings.search_timezone,
        "search_cache_ttl_seconds": settings.search_cache_ttl_seconds,
        "search_cache_maxsize": settings.search_cache_maxsize,
        "metrics_enabled": settings.metrics_enabled,
    }
