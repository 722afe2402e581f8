"""
Executive summary repository.

Cross-page rollups: weekly execution trend, regional execution, category
fill rate and the most frequent execution alerts.
"""
from typing import Any, Dict, List

from core.config import config
from core.database import serialize_document
from core.fallbacks import (
    PACE_DEFAULT,
    to_number,
    ratio_pct,
    capped,
    resolve,
    round_to,
    distinct_count,
    top_n,
)
from core.filters import DashboardFilters
from core.repositories import pipelines as agg
from core.repositories.base import (
    BaseRepository,
    EXECUTION_ALERTS,
    EVENT_PROMOTION_PERFORMANCE,
    ORDER_FULFILLMENT_SUMMARY,
)
from core.repositories.supply_repo import (
    ON_TIME_FLAG,
    ORDERED_QTY,
    SHIPPED_QTY,
    fill_rate_accumulators,
    resolve_fill_rate,
)

MONTHLY_LIMIT = 12
REGION_LIMIT = 10
CATEGORY_LIMIT = 10
ISSUE_LIMIT = 10

ORIGINAL_ON_TIME_FLAG = "Ontime Orig Rad Flg"
DEFAULT_SEVERITY = "Medium"


class SummaryRepository(BaseRepository):
    """Summary page queries across several fact collections."""

    async def get_monthly(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """Execution, shipped volume (millions of cases) and compliance per fiscal week."""
        rows = await self.group(ORDER_FULFILLMENT_SUMMARY, filters, {
            "_id": agg.ref("Fisc Wk End Dt"),
            "execution": {"$avg": agg.flag_pct(ON_TIME_FLAG, "Y")},
            "revenue": agg.sum_of(SHIPPED_QTY),
            "compliance": {"$avg": agg.flag_pct(ORIGINAL_ON_TIME_FLAG, "Y")},
            "totalOrders": agg.count(),
            "onTimeOrders": agg.flag_count(ON_TIME_FLAG, "Y"),
            "onTimeOrig": agg.flag_count(ORIGINAL_ON_TIME_FLAG, "Y"),
        })
        data = []
        for row in rows:
            total = row.get("totalOrders")
            execution = resolve(
                row.get("execution"),
                lambda: capped(ratio_pct(row.get("onTimeOrders"), total)),
            )
            compliance = resolve(
                row.get("compliance"),
                lambda: capped(ratio_pct(row.get("onTimeOrig"), total)),
            )
            data.append({
                "month": serialize_document(row.get("_id")),
                "execution": round_to(execution, 2),
                "revenue": round_to(to_number(row.get("revenue")) / 1_000_000, 2),
                "compliance": round_to(compliance, 2),
                "totalOrders": int(to_number(total)),
                "onTimeOrders": int(to_number(row.get("onTimeOrders"))),
            })
        return top_n(data, "month", MONTHLY_LIMIT, descending=False)

    async def get_regions(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """Share of promotion records with an active channel, per region."""
        rows = await self.group(EVENT_PROMOTION_PERFORMANCE, filters, {
            "_id": agg.ref("Rgn Nm"),
            "execution": {"$avg": {"$cond": [{"$gt": [agg.ref("Chnl Nbr"), 0]}, 100, 0]}},
            "stores": agg.distinct("Store Name"),
            "totalRecords": agg.count(),
            "avgChannel": agg.avg_of("Chnl Nbr"),
            "channelCount": agg.positive_count("Chnl Nbr"),
        })
        data = []
        for row in rows:
            execution = resolve(
                row.get("execution"),
                lambda: capped(ratio_pct(row.get("channelCount"), row.get("totalRecords"))),
            )
            data.append({
                "region": row.get("_id"),
                "execution": round_to(execution, 2),
                "revenue": int(to_number(row.get("channelCount"))),
                "stores": distinct_count(row.get("stores")),
                "totalRecords": int(to_number(row.get("totalRecords"))),
                "avgChannel": round_to(row.get("avgChannel"), 2),
            })
        return top_n(data, "execution", REGION_LIMIT)

    async def get_categories(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """Fill rate per category for the pie chart."""
        rows = await self.group(ORDER_FULFILLMENT_SUMMARY, filters, {
            "_id": agg.ref("Catg Nm"),
            "value": {"$avg": agg.ratio_pct(SHIPPED_QTY, ORDERED_QTY)},
            **fill_rate_accumulators(),
        })
        data = [
            {
                "name": row.get("_id"),
                "value": round_to(resolve_fill_rate(row, "value"), 2),
                "color": config.metrics.primary_color,
                "totalOrders": int(to_number(row.get("totalOrders"))),
                "totalQuantity": to_number(row.get("totalQuantity")),
            }
            for row in rows
        ]
        return top_n(data, "value", CATEGORY_LIMIT)

    async def get_top_issues(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """Most frequent execution alert sections."""
        rows = await self.group(EXECUTION_ALERTS, filters, {
            "_id": agg.ref("Actn Alert Sectn Cd"),
            "count": agg.count(),
            "severity": {"$max": agg.if_null("Actn Alert Seg Cd", DEFAULT_SEVERITY)},
            "avgExecution": agg.avg_of("Feature Execution Pct"),
            "totalRevenue": agg.sum_of("Revenue"),
        })
        data = [
            {
                "issue": row.get("_id"),
                "count": int(to_number(row.get("count"))),
                "severity": row.get("severity") if row.get("severity") is not None else DEFAULT_SEVERITY,
                "avgExecution": round_to(
                    resolve(row.get("avgExecution"), default=self.placeholder(PACE_DEFAULT)), 2
                ),
                "totalRevenue": round_to(row.get("totalRevenue"), 2),
            }
            for row in rows
        ]
        return top_n(data, "count", ISSUE_LIMIT)
