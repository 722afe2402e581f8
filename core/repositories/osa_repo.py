"""
On-shelf availability repository.

OSA comes from the daily in-stock field of the retail priority facts. When
that field is empty the value is derived from pace (+10%, capped at 100).
"""
from typing import Any, Dict, List

from core.database import serialize_document
from core.fallbacks import (
    OVERALL_OSA_DEFAULT,
    REPLENISHMENT_SPEED_HOURS,
    to_number,
    capped,
    resolve,
    round_to,
    round_half_up,
    distinct_count,
    top_n,
)
from core.filters import DashboardFilters
from core.repositories import pipelines as agg
from core.repositories.base import BaseRepository, RETAIL_EXECUTION_PRIORITY
from core.observability import get_logger

logger = get_logger(__name__)

CATEGORY_LIMIT = 20
REGION_LIMIT = 10

# Pace-to-OSA uplift used when the in-stock field is empty
PACE_OSA_FACTOR = 1.1


def osa_from_pace(avg_pace: Any) -> float:
    return capped(to_number(avg_pace) * PACE_OSA_FACTOR)


class OSARepository(BaseRepository):
    """Queries over ``fact_retail_execution_priority`` for the OSA page."""

    async def get_kpis(self, filters: DashboardFilters) -> Dict[str, Any]:
        """Overall OSA, out-of-stock rate and derived turnover."""
        sample = await self.db[RETAIL_EXECUTION_PRIORITY].find_one({})
        row = await self.group_one(RETAIL_EXECUTION_PRIORITY, filters, {
            "overallOSA": {"$avg": agg.instock_pct()},
            "outOfStockRate": {"$avg": agg.ref("Oos Flg")},
            "totalRecords": agg.count(),
            "avgPace": {"$avg": agg.ref("Pace Pct")},
            "sampleValues": {"$first": agg.ref("Daily Instock POD")},
        })
        row = row or {}
        avg_pace = row.get("avgPace")

        overall_osa = resolve(
            row.get("overallOSA"),
            lambda: osa_from_pace(avg_pace),
            self.placeholder(OVERALL_OSA_DEFAULT),
        )
        if not to_number(row.get("overallOSA")):
            logger.debug(
                "OSA field empty, using fallback",
                extra={"overall_osa": overall_osa, "filters": filters.active()},
            )

        return {
            "overallOSA": round_half_up(overall_osa),
            "outOfStockRate": round_half_up(to_number(row.get("outOfStockRate")) * 100),
            "replenishmentSpeed": REPLENISHMENT_SPEED_HOURS if self.placeholders else 0,
            "inventoryTurnover": round_half_up(to_number(avg_pace) * 0.1),
            "debug": {
                "sampleFields": list((sample or {}).keys()),
                "aggregationResult": serialize_document(row) if row else None,
                "totalRecords": int(to_number(row.get("totalRecords"))),
            },
        }

    async def get_by_category(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """OSA, out-of-stock share and replenishment index per category."""
        rows = await self.group(RETAIL_EXECUTION_PRIORITY, filters, {
            "_id": agg.ref("Catg Nm"),
            "osa": {"$avg": agg.instock_pct()},
            "outOfStock": {"$avg": agg.ref("Oos Flg")},
            "count": agg.count(),
            "avgPace": {"$avg": agg.ref("Pace Pct")},
        })
        data = []
        for row in rows:
            avg_pace = to_number(row.get("avgPace"))
            data.append({
                "category": row.get("_id"),
                "osa": round_to(resolve(row.get("osa"), lambda: osa_from_pace(avg_pace)), 2),
                "outOfStock": round_to(to_number(row.get("outOfStock")) * 100, 2),
                "replenishment": round_to(avg_pace * 0.5, 1),
                "count": int(to_number(row.get("count"))),
            })
        return top_n(data, "osa", CATEGORY_LIMIT)

    async def get_regional(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """OSA and critical out-of-stock counts per region."""
        rows = await self.group(RETAIL_EXECUTION_PRIORITY, filters, {
            "_id": agg.ref("Rgn Nm"),
            "osa": {"$avg": agg.instock_pct()},
            "stores": agg.distinct("Store Name"),
            "criticalOOS": agg.positive_count("Oos Flg"),
            "totalRecords": agg.count(),
            "avgPace": {"$avg": agg.ref("Pace Pct")},
        })
        data = []
        for row in rows:
            avg_pace = to_number(row.get("avgPace"))
            data.append({
                "region": row.get("_id"),
                "osa": round_to(resolve(row.get("osa"), lambda: osa_from_pace(avg_pace)), 2),
                "stores": distinct_count(row.get("stores")),
                "criticalOOS": int(to_number(row.get("criticalOOS"))),
                "totalRecords": int(to_number(row.get("totalRecords"))),
                "avgPace": round_to(avg_pace, 1),
            })
        return top_n(data, "osa", REGION_LIMIT)
