"""
Supply chain repository: delivery, fill rate and supplier performance.

Order fulfillment metrics share one shape (on-time flag average and
shipped/ordered ratio, each with a count-based fallback), so the
accumulators and resolvers below are reused by the wallet and summary
repositories.
"""
from typing import Any, Dict, List

from core.database import serialize_document
from core.fallbacks import (
    ON_TIME_DELIVERY_DEFAULT,
    ORDER_FULFILLMENT_DEFAULT,
    INVENTORY_ACCURACY,
    SUPPLIER_PERFORMANCE,
    to_number,
    ratio_pct,
    capped,
    resolve,
    round_to,
    round_half_up,
    top_n,
)
from core.filters import DashboardFilters
from core.repositories import pipelines as agg
from core.repositories.base import (
    BaseRepository,
    ORDER_FULFILLMENT_SUMMARY,
    PO_FULFILLMENT_SUMMARY,
)

CATEGORY_LIMIT = 20
TREND_LIMIT = 12
SUPPLIER_LIMIT = 20

ON_TIME_FLAG = "Ontime Actl Rad Flg"
ORDERED_QTY = "Orig Order Cs Qty"
SHIPPED_QTY = "Ship Cs Qty"


def fill_rate_accumulators() -> Dict[str, Any]:
    """Shipped/ordered ratio plus the totals its fallback needs."""
    return {
        "totalOrders": agg.count(),
        "totalQuantity": agg.sum_of(ORDERED_QTY),
        "shippedQuantity": agg.sum_of(SHIPPED_QTY),
    }


def on_time_accumulators() -> Dict[str, Any]:
    return {
        "onTime": {"$avg": agg.flag_pct(ON_TIME_FLAG, "Y")},
        "onTimeCount": agg.flag_count(ON_TIME_FLAG, "Y"),
    }


def resolve_fill_rate(row: Dict[str, Any], field: str, default: float = None) -> float:
    """Average per-order fill rate → aggregate shipped/ordered → default."""
    return resolve(
        row.get(field),
        lambda: capped(ratio_pct(row.get("shippedQuantity"), row.get("totalQuantity"))),
        default,
    )


def resolve_on_time(row: Dict[str, Any], field: str = "onTime", default: float = None) -> float:
    """Average on-time flag → on-time count / orders → default."""
    return resolve(
        row.get(field),
        lambda: capped(ratio_pct(row.get("onTimeCount"), row.get("totalOrders"))),
        default,
    )


class SupplyRepository(BaseRepository):
    """Queries over order and PO fulfillment summaries."""

    async def get_kpis(self, filters: DashboardFilters) -> Dict[str, Any]:
        row = await self.group_one(ORDER_FULFILLMENT_SUMMARY, filters, {
            "onTimeDelivery": {"$avg": agg.flag_pct(ON_TIME_FLAG, "Y")},
            "orderFulfillment": {"$avg": agg.ratio_pct(SHIPPED_QTY, ORDERED_QTY)},
            "onTimeCount": agg.flag_count(ON_TIME_FLAG, "Y"),
            **fill_rate_accumulators(),
        })
        row = row or {}

        on_time = resolve_on_time(row, "onTimeDelivery", self.placeholder(ON_TIME_DELIVERY_DEFAULT))
        fulfillment = resolve_fill_rate(row, "orderFulfillment", self.placeholder(ORDER_FULFILLMENT_DEFAULT))

        return {
            "onTimeDelivery": round_half_up(on_time),
            "inventoryAccuracy": self.placeholder(INVENTORY_ACCURACY),
            "orderFulfillment": round_half_up(fulfillment),
            "supplierPerformance": self.placeholder(SUPPLIER_PERFORMANCE),
        }

    async def get_delivery_by_category(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        rows = await self.group(ORDER_FULFILLMENT_SUMMARY, filters, {
            "_id": agg.ref("Catg Nm"),
            "accuracy": {"$avg": agg.ratio_pct(SHIPPED_QTY, ORDERED_QTY)},
            **on_time_accumulators(),
            **fill_rate_accumulators(),
        })
        data = [
            {
                "category": row.get("_id"),
                "onTime": round_to(resolve_on_time(row), 2),
                "accuracy": round_to(resolve_fill_rate(row, "accuracy"), 2),
                "totalOrders": int(to_number(row.get("totalOrders"))),
                "totalQuantity": to_number(row.get("totalQuantity")),
            }
            for row in rows
        ]
        return top_n(data, "onTime", CATEGORY_LIMIT)

    async def get_trends(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """Weekly on-time / accuracy series, oldest first."""
        rows = await self.group(ORDER_FULFILLMENT_SUMMARY, filters, {
            "_id": agg.ref("Fisc Wk End Dt"),
            "accuracy": {"$avg": agg.ratio_pct(SHIPPED_QTY, ORDERED_QTY)},
            "issues": agg.flag_count(ON_TIME_FLAG, "N"),
            **on_time_accumulators(),
            **fill_rate_accumulators(),
        })
        data = [
            {
                "week": serialize_document(row.get("_id")),
                "onTime": round_to(resolve_on_time(row), 2),
                "accuracy": round_to(resolve_fill_rate(row, "accuracy"), 2),
                "issues": int(to_number(row.get("issues"))),
                "totalOrders": int(to_number(row.get("totalOrders"))),
                "totalQuantity": to_number(row.get("totalQuantity")),
            }
            for row in rows
        ]
        return top_n(data, "week", TREND_LIMIT, descending=False)

    async def get_suppliers(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        """On-time receipt performance and reliability per supplier."""
        rows = await self.group(PO_FULFILLMENT_SUMMARY, filters, {
            "_id": agg.ref("Customer"),
            "performance": {"$avg": agg.ratio_pct("Po Recv On Time Qty", "Po Order Qty")},
            "reliability": {"$avg": agg.ratio_pct("Po Recv On Time Qty", "Po Total Recv Qty")},
            "totalOrders": agg.count(),
            "totalQuantity": agg.sum_of("Po Order Qty"),
            "receivedQuantity": agg.sum_of("Po Recv On Time Qty"),
            "totalReceived": agg.sum_of("Po Total Recv Qty"),
        })
        data = []
        for row in rows:
            received = row.get("receivedQuantity")
            performance = resolve(
                row.get("performance"),
                lambda: capped(ratio_pct(received, row.get("totalQuantity"))),
            )
            reliability = resolve(
                row.get("reliability"),
                lambda: capped(ratio_pct(received, row.get("totalReceived"))),
            )
            data.append({
                "supplier": row.get("_id"),
                "performance": round_to(performance, 2),
                "reliability": round_to(reliability, 2),
                "totalOrders": int(to_number(row.get("totalOrders"))),
                "totalQuantity": to_number(row.get("totalQuantity")),
                "receivedQuantity": to_number(received),
            })
        return top_n(data, "performance", SUPPLIER_LIMIT)
