"""
Base repository: database handle, filter matching and aggregation helpers.

All metric repositories inherit from this class.
"""
from typing import Any, Dict, List, Optional

from core.config import config
from core.filters import DashboardFilters, RETAIL_FIELDS, SUPPLY_FIELDS
from core.observability import get_logger, Timer

logger = get_logger(__name__)

# Fact collections
EXECUTION_ALERTS = "fact_execution_alerts"
RETAIL_EXECUTION_PRIORITY = "fact_retail_execution_priority"
EVENT_PROMOTION_PERFORMANCE = "fact_event_promotion_performance"
ORDER_FULFILLMENT_SUMMARY = "fact_order_fulfillment_summary"
PO_FULFILLMENT_SUMMARY = "fact_po_fulfillment_summary"

# Which field map each collection is filtered with
COLLECTION_FIELDS = {
    EXECUTION_ALERTS: RETAIL_FIELDS,
    RETAIL_EXECUTION_PRIORITY: RETAIL_FIELDS,
    EVENT_PROMOTION_PERFORMANCE: RETAIL_FIELDS,
    ORDER_FULFILLMENT_SUMMARY: SUPPLY_FIELDS,
    PO_FULFILLMENT_SUMMARY: SUPPLY_FIELDS,
}


class BaseRepository:
    """
    Base repository over an injected database handle.

    Usage:
        class OSARepository(BaseRepository):
            async def get_kpis(self, filters):
                row = await self.group_one(RETAIL_EXECUTION_PRIORITY, filters, {...})
    """

    def __init__(self, db, placeholders: Optional[bool] = None):
        self.db = db
        self.placeholders = config.metrics.placeholders if placeholders is None else placeholders

    def placeholder(self, value: float) -> float:
        """Last cascade step; 0 when placeholders are switched off."""
        return value if self.placeholders else 0.0

    @staticmethod
    def match(collection: str, filters: DashboardFilters) -> Dict[str, Any]:
        """``$match`` document for a collection, using its family's field names."""
        return filters.to_match(COLLECTION_FIELDS.get(collection, RETAIL_FIELDS))

    async def aggregate(self, collection: str, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Run a pipeline and return all result documents."""
        with Timer(f"aggregate.{collection}", logger=logger, record=True):
            cursor = await self.db[collection].aggregate(pipeline)
            return await cursor.to_list(None)

    async def group(
        self,
        collection: str,
        filters: DashboardFilters,
        group: Dict[str, Any],
    ) -> List[Dict[str, Any]]:
        """``$match`` on the filters, then ``$group``; returns all groups."""
        pipeline = [
            {"$match": self.match(collection, filters)},
            {"$group": group},
        ]
        return await self.aggregate(collection, pipeline)

    async def group_one(
        self,
        collection: str,
        filters: DashboardFilters,
        accumulators: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """Collapse every matching document into one row (None when nothing matched)."""
        rows = await self.group(collection, filters, {"_id": None, **accumulators})
        return rows[0] if rows else None
