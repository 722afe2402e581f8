"""On-shelf availability endpoints."""
from typing import List

from fastapi import APIRouter, Depends, Request

from core.filters import DashboardFilters
from core.repositories import OSARepository
from web.schemas import OSAKPIResponse, OSACategory, OSARegion
from ._deps import (
    limiter, get_logger, api_errors, get_filters, get_osa_repo,
    RATE_LIMIT_METRICS,
)

router = APIRouter(prefix="/osa")
logger = get_logger(__name__)


@router.get("/kpis", response_model=OSAKPIResponse)
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_osa_kpis(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: OSARepository = Depends(get_osa_repo),
):
    """Overall OSA, out-of-stock rate, replenishment and turnover."""
    return await repo.get_kpis(filters)


@router.get("/by-category", response_model=List[OSACategory])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_osa_by_category(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: OSARepository = Depends(get_osa_repo),
):
    return await repo.get_by_category(filters)


@router.get("/regional", response_model=List[OSARegion])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_osa_regional(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: OSARepository = Depends(get_osa_repo),
):
    return await repo.get_regional(filters)
