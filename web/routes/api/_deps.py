"""Shared dependencies for API route modules."""
import functools
import logging
import time
from typing import Optional

from fastapi import Depends, HTTPException, Query
from slowapi import Limiter
from slowapi.util import get_remote_address

from core.database import get_database
from core.exceptions import QueryError
from core.filters import DashboardFilters
from core.observability import metrics
from core.repositories import (
    ExecutionRepository,
    OSARepository,
    SupplyRepository,
    WalletRepository,
    SummaryRepository,
    SchemaRepository,
)
from web.config import RATE_LIMIT_ENABLED, RATE_LIMIT_METRICS, RATE_LIMIT_META

# Shared limiter instance (RATE_LIMIT_ENABLED=true to turn it on)
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)

# Track startup time for uptime calculation
START_TIME = time.time()

__all__ = [
    "limiter",
    "START_TIME",
    "RATE_LIMIT_METRICS",
    "RATE_LIMIT_META",
    "get_logger",
    "get_filters",
    "api_errors",
]


# Shared logger factory
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


logger = get_logger(__name__)


def get_filters(
    region: Optional[str] = Query(None, description="Region name, or 'All'"),
    area: Optional[str] = Query(None, description="Area name, or 'All'"),
    store: Optional[str] = Query(None, description="Store name, or 'All'"),
    category: Optional[str] = Query(None, description="Category name, or 'All'"),
    event: Optional[str] = Query(None, description="Event name, or 'All'"),
    month: Optional[str] = Query(None, description="Month name, or 'All'"),
) -> DashboardFilters:
    """Global filter bar selection from the query string."""
    return DashboardFilters(
        region=region,
        area=area,
        store=store,
        category=category,
        event=event,
        month=month,
    )


def api_errors(func):
    """
    Turn any failure inside a metric route into a QueryError.

    The app-level handler renders QueryError as HTTP 500 ``{"error": message}``.
    HTTPException (rate limits, explicit 4xx) passes through.
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"{func.__name__} failed: {e}", exc_info=True)
            metrics.record_error(type(e).__name__)
            raise QueryError.wrap(e, endpoint=func.__name__) from e
    return wrapper


# ─── Repository providers ─────────────────────────────────────────────────────

def get_execution_repo(db=Depends(get_database)) -> ExecutionRepository:
    return ExecutionRepository(db)


def get_osa_repo(db=Depends(get_database)) -> OSARepository:
    return OSARepository(db)


def get_supply_repo(db=Depends(get_database)) -> SupplyRepository:
    return SupplyRepository(db)


def get_wallet_repo(db=Depends(get_database)) -> WalletRepository:
    return WalletRepository(db)


def get_summary_repo(db=Depends(get_database)) -> SummaryRepository:
    return SummaryRepository(db)


def get_schema_repo(db=Depends(get_database)) -> SchemaRepository:
    return SchemaRepository(db)
