"""Error handling middleware for mapping exceptions to HTTP responses."""

from collections.abc import Callable
from datetime import UTC, datetime

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from tablesearch.api.schemas.errors import APIError, ErrorCode
from tablesearch.core.exceptions import (
    ConfigurationError,
    DataSourceError,
    InvalidSearchRequestError,
)
from tablesearch.core.logging import get_logger, log_exception

logger = get_logger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware that catches exceptions and returns standardized error responses.

    Maps search exceptions to HTTP status codes and formats all errors
    using the APIError schema.
    """

    def __init__(self, app, debug: bool = False) -> None:
        super().__init__(app)
        self._debug = debug

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and handle any exceptions."""
        try:
            return await call_next(request)
        except Exception as exc:
            return self._handle_exception(request, exc)

    def _handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """Convert exception to JSON error response."""
        status_code, error_code, message, details = self._map_exception(exc)
        if status_code >= 500:
            log_exception(logger, exc, path=request.url.path)

        request_id = getattr(request.state, "request_id", None)
        error = APIError(
            error=message,
            error_code=error_code,
            details=details,
            request_id=request_id,
            timestamp=datetime.now(UTC),
        )
        headers = {"X-Request-ID": request_id} if request_id else None
        return JSONResponse(
            status_code=status_code,
            content=error.model_dump(mode="json"),
            headers=headers,
        )

    def _map_exception(self, exc: Exception) -> tuple[int, str, str, object]:
        """Map exception to (status_code, error_code, message, details)."""
        if isinstance(exc, InvalidSearchRequestError):
            return (
                400,
                ErrorCode.INVALID_REQUEST.value,
                str(exc.args[0]),
                {"parameter": exc.parameter, "value": str(exc.value)},
            )

        if isinstance(exc, DataSourceError):
            return (
                500,
                ErrorCode.DATASOURCE_ERROR.value,
                f"Failed to fetch {exc.table}",
                str(exc),
            )

        if isinstance(exc, ConfigurationError):
            return (
                500,
                ErrorCode.CONFIGURATION_ERROR.value,
                "Search is misconfigured",
                str(exc) if self._debug else None,
            )

        return (
            500,
            ErrorCode.INTERNAL_ERROR.value,
            "Internal server error",
            {"type": type(exc).__name__} if self._debug else None,
        )
