"""Executive summary endpoints."""
from typing import List

from fastapi import APIRouter, Depends, Request

from core.filters import DashboardFilters
from core.repositories import SummaryRepository
from web.schemas import MonthlySummary, RegionSummary, CategorySlice, TopIssue
from ._deps import (
    limiter, get_logger, api_errors, get_filters, get_summary_repo,
    RATE_LIMIT_METRICS,
)

router = APIRouter(prefix="/summary")
logger = get_logger(__name__)


@router.get("/monthly", response_model=List[MonthlySummary])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_summary_monthly(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: SummaryRepository = Depends(get_summary_repo),
):
    """Execution / compliance trend by fiscal week, oldest 12."""
    return await repo.get_monthly(filters)


@router.get("/regions", response_model=List[RegionSummary])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_summary_regions(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: SummaryRepository = Depends(get_summary_repo),
):
    return await repo.get_regions(filters)


@router.get("/categories", response_model=List[CategorySlice])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_summary_categories(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: SummaryRepository = Depends(get_summary_repo),
):
    return await repo.get_categories(filters)


@router.get("/top-issues", response_model=List[TopIssue])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_summary_top_issues(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: SummaryRepository = Depends(get_summary_repo),
):
    """Most frequent execution alerts, top 10."""
    return await repo.get_top_issues(filters)
