"""Health check and metrics endpoints."""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST

from tablesearch.api.dependencies import SearchBackend, get_search_engines
from tablesearch.api.schemas.health import HealthResponse, HealthStatus
from tablesearch.observability.metrics import get_metrics

router = APIRouter(tags=["health"])

APP_VERSION = "0.1.0"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Basic health check",
    description="Returns liveness status and the searchable tables.",
)
async def health_check(
    engines: Annotated[Mapping[str, SearchBackend], Depends(get_search_engines)],
) -> HealthResponse:
    """Basic liveness check endpoint."""
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        version=APP_VERSION,
        timestamp=datetime.now(UTC),
        tables=sorted(engines),
    )


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    response_class=Response,
    include_in_schema=False,
)
async def metrics() -> Response:
    """Expose metrics in the Prometheus text format."""
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)
