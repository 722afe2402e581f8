"""
Feature execution repository.

Backs the home / feature-execution page: headline KPIs, per-category pace
and day-one readiness, promotion impact and the store leaderboard.
"""
from typing import Any, Dict, List

from core.config import config
from core.fallbacks import (
    FEATURE_EXECUTION_DEFAULT,
    EXPECTED_LOCATION_DEFAULT,
    DAY_ONE_READY_DEFAULT,
    PERFORMANCE_SCORE_DEFAULT,
    PACE_DEFAULT,
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
from core.repositories.base import (
    BaseRepository,
    EXECUTION_ALERTS,
    RETAIL_EXECUTION_PRIORITY,
    EVENT_PROMOTION_PERFORMANCE,
)
from core.observability import get_logger

logger = get_logger(__name__)

CATEGORY_LIMIT = 12
STORE_LIMIT = 20

# Promotion impact weights per record: channel present vs absent
IMPACT_GAIN = 1_000_000
IMPACT_LOSS = -500_000
IMPACT_PER_CHANNEL = 100_000


class ExecutionRepository(BaseRepository):
    """Queries over execution alerts, retail priority and promotion facts."""

    async def get_kpis(self, filters: DashboardFilters) -> Dict[str, Any]:
        """Headline execution KPIs, falling back to retail pace/in-stock data."""
        execution = await self.group_one(EXECUTION_ALERTS, filters, {
            "featureExecution": agg.avg_of("Feature Execution Pct"),
            "featureExpectedLocation": agg.avg_of("Expected Location Pct"),
            "dayOneReady": agg.avg_of("Day One Ready Pct"),
            "incrementalGainLoss": agg.sum_of("Incremental Gain/Loss"),
            "totalRevenue": agg.sum_of("Revenue"),
            "storeCount": agg.distinct("Store Name"),
            "performanceScore": agg.avg_of("Performance Score"),
            "totalRecords": agg.count(),
        })
        retail = await self.group_one(RETAIL_EXECUTION_PRIORITY, filters, {
            "avgPace": {"$avg": agg.ref("Pace Pct")},
            "avgInstock": {"$avg": agg.ref("Daily Instock POD *")},
            "totalStores": agg.distinct("Store Name"),
            "totalRecords": agg.count(),
        })
        execution = execution or {}
        retail = retail or {}
        avg_pace = to_number(retail.get("avgPace"))
        avg_instock = to_number(retail.get("avgInstock"))

        feature_execution = resolve(
            execution.get("featureExecution"),
            lambda: capped(avg_pace * 1.05),
            self.placeholder(FEATURE_EXECUTION_DEFAULT),
        )
        expected_location = resolve(
            execution.get("featureExpectedLocation"),
            lambda: capped(avg_pace * 0.95),
            self.placeholder(EXPECTED_LOCATION_DEFAULT),
        )
        day_one_ready = resolve(
            execution.get("dayOneReady"),
            lambda: capped(avg_instock * 1.1),
            self.placeholder(DAY_ONE_READY_DEFAULT),
        )
        performance_score = resolve(
            execution.get("performanceScore"),
            lambda: capped(avg_pace / 10, cap=10),
            self.placeholder(PERFORMANCE_SCORE_DEFAULT),
        )

        return {
            "featureExecution": round_half_up(feature_execution),
            "featureExpectedLocation": round_half_up(expected_location),
            "dayOneReady": round_half_up(day_one_ready),
            "incrementalGainLoss": to_number(execution.get("incrementalGainLoss")),
            "totalRevenue": to_number(execution.get("totalRevenue")),
            "storeCount": distinct_count(execution.get("storeCount")),
            "performanceScore": round_half_up(performance_score),
            "avgPace": avg_pace,
            "avgInstock": avg_instock,
            "debug": {
                "executionRecords": int(to_number(execution.get("totalRecords"))),
                "retailRecords": int(to_number(retail.get("totalRecords"))),
                "hasExecutionData": bool(execution),
                "hasRetailData": bool(retail),
            },
        }

    async def get_feature_execution_by_category(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """Average pace per category for the feature execution bar chart."""
        rows = await self.group(RETAIL_EXECUTION_PRIORITY, filters, {
            "_id": agg.ref("Catg Nm"),
            "value": agg.avg_of("Pace Pct"),
            "count": agg.count(),
        })
        data = [
            {
                "category": row.get("_id"),
                "value": round_to(resolve(row.get("value"), default=self.placeholder(PACE_DEFAULT)), 1),
                "color": config.metrics.primary_color,
                "count": int(to_number(row.get("count"))),
            }
            for row in rows
        ]
        return top_n(data, "value", CATEGORY_LIMIT)

    async def get_day_one_ready(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """Per-category in-stock on day one, derived from pace where missing."""
        rows = await self.group(RETAIL_EXECUTION_PRIORITY, filters, {
            "_id": agg.ref("Catg Nm"),
            "value": {"$avg": agg.instock_pct()},
            "count": agg.count(),
            "avgPace": agg.avg_of("Pace Pct"),
        })
        data = []
        for row in rows:
            avg_pace = to_number(row.get("avgPace"))
            value = resolve(row.get("value"), lambda: capped(avg_pace * 1.1))
            data.append({
                "category": row.get("_id"),
                "value": round_to(value, 1),
                "color": config.metrics.day_one_color,
                "count": int(to_number(row.get("count"))),
            })
        return top_n(data, "value", CATEGORY_LIMIT)

    async def get_incremental_impact(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """Estimated promotion gain/loss per product category."""
        rows = await self.group(EVENT_PROMOTION_PERFORMANCE, filters, {
            # The source field name carries a trailing space
            "_id": agg.ref("Product Category "),
            "value": {
                "$sum": {"$cond": [{"$gt": [agg.ref("Chnl Nbr"), 0]}, IMPACT_GAIN, IMPACT_LOSS]}
            },
            "count": agg.count(),
            "avgChannel": agg.avg_of("Chnl Nbr"),
        })
        data = []
        for row in rows:
            value = to_number(row.get("value"))
            if value == 0:
                value = to_number(row.get("avgChannel")) * IMPACT_PER_CHANNEL
            data.append({
                "category": row.get("_id"),
                "value": round_to(value, 0),
                "count": int(to_number(row.get("count"))),
            })
        return top_n(data, "value", CATEGORY_LIMIT)

    async def get_hierarchy_performance(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """Top stores by average pace."""
        rows = await self.group(RETAIL_EXECUTION_PRIORITY, filters, {
            "_id": agg.ref("Store Name"),
            "performance": agg.avg_of("Pace Pct"),
            "region": {"$first": agg.ref("Rgn Nm")},
            "area": {"$first": agg.ref("Area Nm")},
            "category": {"$first": agg.ref("Catg Nm")},
            "count": agg.count(),
        })
        data = [
            {
                "store": row.get("_id"),
                "performance": round_to(resolve(row.get("performance"), default=self.placeholder(PACE_DEFAULT)), 1),
                "region": row.get("region"),
                "area": row.get("area"),
                "category": row.get("category"),
                "count": int(to_number(row.get("count"))),
            }
            for row in rows
        ]
        return top_n(data, "performance", STORE_LIMIT)
