"""Request logging middleware."""

import time
from collections.abc import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from tablesearch.core.logging import LogContext, get_logger

logger = get_logger("tablesearch.api.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that assigns a request ID and logs every request.

    The request ID is bound to the structlog context for the duration of
    the request, so engine and data source logs carry it too.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log request/response."""
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        request.state.request_id = request_id
        start_time = time.perf_counter()

        with LogContext(request_id=request_id):
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            self._log_request(request, response, duration_ms)

        response.headers["X-Request-ID"] = request_id
        return response

    def _log_request(self, request: Request, response: Response, duration_ms: float) -> None:
        """Log the completed request, at a level matching its status code."""
        status_code = response.status_code
        if status_code >= 500:
            log = logger.error
        elif status_code >= 400:
            log = logger.warning
        else:
            log = logger.info

        log(
            "http_request",
            method=request.method,
            path=request.url.path,
            query=str(request.url.query) or None,
            status_code=status_code,
            duration_ms=round(duration_ms, 2),
            client_ip=request.client.host if request.client else None,
        )
