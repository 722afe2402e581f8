"""
Pydantic response models for API endpoints.

Group labels (category, region, store, week...) come straight from the fact
collections and are not guaranteed to be strings, so they are typed ``Any``.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


# ═══════════════════════════════════════════════════════════════════════════════
# HEALTH & METRICS
# ═══════════════════════════════════════════════════════════════════════════════

class HealthResponse(BaseModel):
    """Liveness response; never depends on the database."""
    status: str = Field("ok", description="Always 'ok' while the process serves requests")


class MetricsResponse(BaseModel):
    """In-memory application metrics."""
    uptime_seconds: int
    correlation_id: Optional[str] = None
    requests: Dict[str, int] = Field(default_factory=dict)
    errors: Dict[str, int] = Field(default_factory=dict)
    timing: Dict[str, Any] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# FEATURE EXECUTION
# ═══════════════════════════════════════════════════════════════════════════════

class ExecutionKPIResponse(BaseModel):
    """Headline feature execution KPIs (percentages unless noted)."""
    featureExecution: float
    featureExpectedLocation: float
    dayOneReady: float
    incrementalGainLoss: float = Field(description="Sum of incremental gain/loss")
    totalRevenue: float
    storeCount: int
    performanceScore: float = Field(description="Score out of 10")
    avgPace: float
    avgInstock: float
    debug: Dict[str, Any] = Field(default_factory=dict)


class CategoryValue(BaseModel):
    """One bar of a per-category chart."""
    category: Any = None
    value: float
    color: str
    count: int


class CategoryImpact(BaseModel):
    category: Any = None
    value: int = Field(description="Estimated gain/loss")
    count: int


class StorePerformance(BaseModel):
    store: Any = None
    performance: float
    region: Any = None
    area: Any = None
    category: Any = None
    count: int


# ═══════════════════════════════════════════════════════════════════════════════
# ON-SHELF AVAILABILITY
# ═══════════════════════════════════════════════════════════════════════════════

class OSAKPIResponse(BaseModel):
    overallOSA: float
    outOfStockRate: float
    replenishmentSpeed: int = Field(description="Hours")
    inventoryTurnover: float
    debug: Dict[str, Any] = Field(default_factory=dict)


class OSACategory(BaseModel):
    category: Any = None
    osa: float
    outOfStock: float
    replenishment: float
    count: int


class OSARegion(BaseModel):
    region: Any = None
    osa: float
    stores: int
    criticalOOS: int
    totalRecords: int
    avgPace: float


# ═══════════════════════════════════════════════════════════════════════════════
# SUPPLY CHAIN
# ═══════════════════════════════════════════════════════════════════════════════

class SupplyKPIResponse(BaseModel):
    onTimeDelivery: float
    inventoryAccuracy: float
    orderFulfillment: float
    supplierPerformance: float


class DeliveryCategory(BaseModel):
    category: Any = None
    onTime: float
    accuracy: float
    totalOrders: int
    totalQuantity: float


class SupplyTrendPoint(BaseModel):
    week: Any = None
    onTime: float
    accuracy: float
    issues: int
    totalOrders: int
    totalQuantity: float


class SupplierPerformance(BaseModel):
    supplier: Any = None
    performance: float
    reliability: float
    totalOrders: int
    totalQuantity: float
    receivedQuantity: float


# ═══════════════════════════════════════════════════════════════════════════════
# RETAIL WALLET
# ═══════════════════════════════════════════════════════════════════════════════

class WalletKPIResponse(BaseModel):
    totalWalletShare: float
    walletGrowth: float
    customerPenetration: float
    avgWalletSize: float


class WalletCategory(BaseModel):
    category: Any = None
    walletShare: float
    growth: float
    penetration: float
    totalOrders: int
    totalQuantity: float
    avgOrderValue: float


class WalletRegion(BaseModel):
    region: Any = None
    walletShare: float
    growth: float
    customers: int
    totalOrders: int
    totalQuantity: float


# ═══════════════════════════════════════════════════════════════════════════════
# SUMMARY
# ═══════════════════════════════════════════════════════════════════════════════

class MonthlySummary(BaseModel):
    month: Any = None
    execution: float
    revenue: float = Field(description="Shipped cases, millions")
    compliance: float
    totalOrders: int
    onTimeOrders: int


class RegionSummary(BaseModel):
    region: Any = None
    execution: float
    revenue: int
    stores: int
    totalRecords: int
    avgChannel: float


class CategorySlice(BaseModel):
    name: Any = None
    value: float
    color: str
    totalOrders: int
    totalQuantity: float


class TopIssue(BaseModel):
    issue: Any = None
    count: int
    severity: Any = None
    avgExecution: float
    totalRevenue: float
