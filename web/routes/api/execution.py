"""Feature execution KPIs, category charts, promotion impact and store hierarchy endpoints."""
from typing import List

from fastapi import APIRouter, Depends, Request

from core.filters import DashboardFilters
from core.repositories import ExecutionRepository
from web.schemas import (
    ExecutionKPIResponse,
    CategoryValue,
    CategoryImpact,
    StorePerformance,
)
from ._deps import (
    limiter, get_logger, api_errors, get_filters, get_execution_repo,
    RATE_LIMIT_METRICS,
)

router = APIRouter()
logger = get_logger(__name__)


@router.get("/kpis", response_model=ExecutionKPIResponse)
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_kpis(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: ExecutionRepository = Depends(get_execution_repo),
):
    """Headline execution KPIs for the home page cards."""
    return await repo.get_kpis(filters)


@router.get("/feature-execution-by-category", response_model=List[CategoryValue])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_feature_execution_by_category(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: ExecutionRepository = Depends(get_execution_repo),
):
    """Average pace per category, top 12."""
    return await repo.get_feature_execution_by_category(filters)


@router.get("/day-one-ready", response_model=List[CategoryValue])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_day_one_ready(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: ExecutionRepository = Depends(get_execution_repo),
):
    """Day-one in-stock per category, top 12."""
    return await repo.get_day_one_ready(filters)


@router.get("/incremental-impact", response_model=List[CategoryImpact])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_incremental_impact(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: ExecutionRepository = Depends(get_execution_repo),
):
    """Promotion gain/loss per product category, top 12."""
    return await repo.get_incremental_impact(filters)


@router.get("/hierarchy-performance", response_model=List[StorePerformance])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_hierarchy_performance(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: ExecutionRepository = Depends(get_execution_repo),
):
    """Best performing stores by pace, top 20."""
    return await repo.get_hierarchy_performance(filters)
