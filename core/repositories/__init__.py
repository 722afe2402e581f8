"""
Repository layer over the MongoDB fact collections.

One repository per dashboard page:
- BaseRepository: database handle, filter matching, aggregation helpers
- ExecutionRepository: feature execution KPIs and charts
- OSARepository: on-shelf availability
- SupplyRepository: delivery, fill rate, suppliers
- WalletRepository: retail wallet share
- SummaryRepository: executive summary rollups
- SchemaRepository: collection and field introspection
"""
from core.repositories.base import BaseRepository
from core.repositories.execution_repo import ExecutionRepository
from core.repositories.osa_repo import OSARepository
from core.repositories.supply_repo import SupplyRepository
from core.repositories.wallet_repo import WalletRepository
from core.repositories.summary_repo import SummaryRepository
from core.repositories.schema_repo import SchemaRepository

__all__ = [
    "BaseRepository",
    "ExecutionRepository",
    "OSARepository",
    "SupplyRepository",
    "WalletRepository",
    "SummaryRepository",
    "SchemaRepository",
]
