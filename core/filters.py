"""
Dashboard filter construction.

Translates the six optional query-string dimensions into a MongoDB
equality match. Field names differ between the retail fact collections and
the supply-chain ones, so each collection family has its own field map.
"""
from dataclasses import dataclass, fields
from typing import Dict, Optional

# Value meaning "do not filter on this dimension"
ALL = "All"

DIMENSIONS = ("region", "area", "store", "category", "event", "month")

# Dimension name -> document field, shared by both families
_COMMON_FIELDS = {
    "area": "Area Nm",
    "store": "Store Name",
    "category": "Catg Nm",
    "event": "Event Nm",
    "month": "Month Nm",
}

# fact_execution_alerts, fact_retail_execution_priority, fact_event_promotion_performance
RETAIL_FIELDS: Dict[str, str] = {"region": "Rgn Nm", **_COMMON_FIELDS}

# fact_order_fulfillment_summary, fact_po_fulfillment_summary
SUPPLY_FIELDS: Dict[str, str] = {"region": "Sales Mgmt B Nm", **_COMMON_FIELDS}


def is_selected(value: Optional[str]) -> bool:
    """True when a dimension value should become part of the match."""
    return bool(value) and value != ALL


@dataclass(frozen=True)
class DashboardFilters:
    """The global filter bar selection: one optional value per dimension."""
    region: Optional[str] = None
    area: Optional[str] = None
    store: Optional[str] = None
    category: Optional[str] = None
    event: Optional[str] = None
    month: Optional[str] = None

    def active(self) -> Dict[str, str]:
        """Dimensions that carry a concrete value, keyed by dimension name."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if is_selected(getattr(self, f.name))
        }

    @property
    def is_filtered(self) -> bool:
        return bool(self.active())

    def to_match(self, field_map: Dict[str, str]) -> Dict[str, str]:
        """
        Build the ``$match`` document for a collection family.

        Args:
            field_map: Dimension name -> document field (RETAIL_FIELDS or SUPPLY_FIELDS)

        Returns:
            Equality match with only the non-sentinel dimensions

        Examples:
            >>> DashboardFilters(region="WM Region", store="All").to_match(RETAIL_FIELDS)
            {'Rgn Nm': 'WM Region'}

            >>> DashboardFilters(region="WM Region").to_match(SUPPLY_FIELDS)
            {'Sales Mgmt B Nm': 'WM Region'}
        """
        return {
            field_map[name]: value
            for name, value in self.active().items()
            if name in field_map
        }


def build_match(field_map: Dict[str, str], **params: Optional[str]) -> Dict[str, str]:
    """Shortcut for ``DashboardFilters(**params).to_match(field_map)``."""
    return DashboardFilters(**params).to_match(field_map)
