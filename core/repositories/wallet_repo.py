"""
Retail wallet repository.

Wallet share is approximated by the shipped/ordered fill rate of the order
fulfillment summary; penetration by the customer classification indicator.
"""
from typing import Any, Dict, List

from core.fallbacks import (
    WALLET_SHARE_DEFAULT,
    CUSTOMER_PENETRATION_DEFAULT,
    WALLET_GROWTH,
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
from core.repositories.base import BaseRepository, ORDER_FULFILLMENT_SUMMARY
from core.repositories.supply_repo import (
    ORDERED_QTY,
    SHIPPED_QTY,
    fill_rate_accumulators,
    resolve_fill_rate,
)

CATEGORY_LIMIT = 20
REGION_LIMIT = 20

PENETRATION_FIELD = "Cust Prod Inv Clasfctn Ind"
GROWTH_FIELD = "zSales Order Final RAD On Time Order Count"


class WalletRepository(BaseRepository):
    """Wallet share queries over ``fact_order_fulfillment_summary``."""

    async def get_kpis(self, filters: DashboardFilters) -> Dict[str, Any]:
        row = await self.group_one(ORDER_FULFILLMENT_SUMMARY, filters, {
            "totalWalletShare": {"$avg": agg.ratio_pct(SHIPPED_QTY, ORDERED_QTY)},
            "customerPenetration": agg.avg_of(PENETRATION_FIELD),
            "avgOrderValue": agg.avg_of(ORDERED_QTY),
            "totalRecords": agg.count(),
            **fill_rate_accumulators(),
        })
        row = row or {}

        wallet_share = resolve_fill_rate(row, "totalWalletShare", self.placeholder(WALLET_SHARE_DEFAULT))
        penetration = resolve(
            row.get("customerPenetration"),
            lambda: capped(to_number(row.get("totalOrders")) / 100 * 10),
            self.placeholder(CUSTOMER_PENETRATION_DEFAULT),
        )

        return {
            "totalWalletShare": round_half_up(wallet_share),
            "walletGrowth": self.placeholder(WALLET_GROWTH),
            "customerPenetration": round_half_up(penetration),
            "avgWalletSize": round_half_up(to_number(row.get("avgOrderValue")) * 1.5),
        }

    async def get_by_category(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        rows = await self.group(ORDER_FULFILLMENT_SUMMARY, filters, {
            "_id": agg.ref("Catg Nm"),
            "walletShare": {"$avg": agg.ratio_pct(SHIPPED_QTY, ORDERED_QTY)},
            "penetration": agg.avg_of(PENETRATION_FIELD),
            "avgOrderValue": agg.avg_of(ORDERED_QTY),
            **fill_rate_accumulators(),
        })
        data = []
        for row in rows:
            wallet_share = resolve_fill_rate(row, "walletShare")
            penetration = resolve(
                row.get("penetration"),
                lambda: capped(to_number(row.get("totalOrders")) / 10 * 10),
            )
            data.append({
                "category": row.get("_id"),
                "walletShare": round_to(wallet_share, 2),
                "growth": round_to(wallet_share * 0.1, 2),
                "penetration": round_to(penetration, 2),
                "totalOrders": int(to_number(row.get("totalOrders"))),
                "totalQuantity": to_number(row.get("totalQuantity")),
                "avgOrderValue": round_to(row.get("avgOrderValue"), 2),
            })
        return top_n(data, "walletShare", CATEGORY_LIMIT)

    async def get_regions(self, filters: DashboardFilters) -> List[Dict[str, Any]]:
        rows = await self.group(ORDER_FULFILLMENT_SUMMARY, filters, {
            "_id": agg.ref("Sales Mgmt B Nm"),
            "walletShare": {"$avg": agg.ratio_pct(SHIPPED_QTY, ORDERED_QTY)},
            "growth": agg.avg_of(GROWTH_FIELD),
            "customers": agg.distinct("Store Name"),
            **fill_rate_accumulators(),
        })
        data = []
        for row in rows:
            growth = resolve(
                row.get("growth"),
                lambda: to_number(row.get("totalOrders")) / 10 * 5,
            )
            data.append({
                "region": row.get("_id"),
                "walletShare": round_to(resolve_fill_rate(row, "walletShare"), 2),
                "growth": round_to(growth, 2),
                "customers": distinct_count(row.get("customers")),
                "totalOrders": int(to_number(row.get("totalOrders"))),
                "totalQuantity": to_number(row.get("totalQuantity")),
            })
        return top_n(data, "walletShare", REGION_LIMIT)
