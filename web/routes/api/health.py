"""Health check, metrics, schema discovery and debug endpoints."""
import time

from fastapi import APIRouter, Depends, Request

from core.observability import get_correlation_id, metrics
from core.repositories import SchemaRepository
from web.schemas import HealthResponse, MetricsResponse
from ._deps import (
    limiter, get_logger, api_errors, get_schema_repo,
    START_TIME, RATE_LIMIT_META,
)

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness probe. Does not touch the database and is not rate limited."""
    return {"status": "ok"}


@router.get("/metrics", response_model=MetricsResponse)
@limiter.limit(RATE_LIMIT_META)
async def get_metrics_endpoint(request: Request):
    """Get application metrics."""
    return {
        "uptime_seconds": int(time.time() - START_TIME),
        "correlation_id": get_correlation_id(),
        **metrics.get_stats(),
    }


@router.get("/schema")
@limiter.limit(RATE_LIMIT_META)
@api_errors
async def get_schema(
    request: Request,
    repo: SchemaRepository = Depends(get_schema_repo),
):
    """Fields, a sample document and a count for every non-empty collection."""
    return await repo.describe_collections()


@router.get("/debug/osa-fields")
@limiter.limit(RATE_LIMIT_META)
@api_errors
async def debug_osa_fields(
    request: Request,
    repo: SchemaRepository = Depends(get_schema_repo),
):
    """Find which retail priority field carries on-shelf availability."""
    return await repo.discover_osa_fields()
