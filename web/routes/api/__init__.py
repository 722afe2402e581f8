"""
API routes split by dashboard page.

Each sub-module defines its own APIRouter which is composed
into the top-level router exposed by this package.
"""
from fastapi import APIRouter

from .health import router as health_router
from .execution import router as execution_router
from .osa import router as osa_router
from .supply import router as supply_router
from .wallet import router as wallet_router
from .summary import router as summary_router

router = APIRouter(tags=["api"])

router.include_router(health_router)
router.include_router(execution_router)
router.include_router(osa_router)
router.include_router(supply_router)
router.include_router(wallet_router)
router.include_router(summary_router)
