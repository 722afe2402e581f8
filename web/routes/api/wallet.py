"""Retail wallet share endpoints."""
from typing import List

from fastapi import APIRouter, Depends, Request

from core.filters import DashboardFilters
from core.repositories import WalletRepository
from web.schemas import WalletKPIResponse, WalletCategory, WalletRegion
from ._deps import (
    limiter, get_logger, api_errors, get_filters, get_wallet_repo,
    RATE_LIMIT_METRICS,
)

router = APIRouter(prefix="/wallet")
logger = get_logger(__name__)


@router.get("/kpis", response_model=WalletKPIResponse)
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_wallet_kpis(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: WalletRepository = Depends(get_wallet_repo),
):
    return await repo.get_kpis(filters)


@router.get("/by-category", response_model=List[WalletCategory])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_wallet_by_category(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: WalletRepository = Depends(get_wallet_repo),
):
    return await repo.get_by_category(filters)


@router.get("/competitors")
async def get_wallet_competitors():
    """Competitor wallet share. No source data yet, always empty, never limited."""
    return []


@router.get("/regions", response_model=List[WalletRegion])
@limiter.limit(RATE_LIMIT_METRICS)
@api_errors
async def get_wallet_regions(
    request: Request,
    filters: DashboardFilters = Depends(get_filters),
    repo: WalletRepository = Depends(get_wallet_repo),
):
    return await repo.get_regions(filters)
