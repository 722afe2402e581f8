"""Supply chain delivery, trend and supplier endpoints."""
from typing import List

from fastapi import APIRouter, Depends, Request

from core.filters import DashboardFilters
from core.repositories import SupplyRepository
from web.schemas import (
    SupplyKPIResponse,
    DeliveryCategory,
    SupplyTrendPoint,
    SupplierPerformance,
)
from ._deps import (
    limiter, get_logger, api_errors, get_filters, get_supply_repo,
    RATE_LIMIT_METRICS,
)

router = APIRouter(prefix="/supply")
logger = get_logger(__name__)


@router.get("/kpis", response_model=SupplyKPIResponse)
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_supply_kpis(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: SupplyRepository = Depends(get_supply_repo),
):
    """On-time delivery and order fulfillment."""
    return await repo.get_kpis(filters)


@router.get("/delivery-by-category", response_model=List[DeliveryCategory])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_delivery_by_category(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: SupplyRepository = Depends(get_supply_repo),
):
    return await repo.get_delivery_by_category(filters)


@router.get("/trends", response_model=List[SupplyTrendPoint])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_supply_trends(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: SupplyRepository = Depends(get_supply_repo),
):
    """Weekly series, oldest 12 fiscal weeks."""
    return await repo.get_trends(filters)


@router.get("/suppliers", response_model=List[SupplierPerformance])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_suppliers(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: SupplyRepository = Depends(get_supply_repo),
):
    return await repo.get_suppliers(filters)
