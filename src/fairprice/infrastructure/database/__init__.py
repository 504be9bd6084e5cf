"""Persistence: tabular store abstraction, SQL and JSON snapshot backends, accessor."""

from fairprice.infrastructure.database.accessor import FinancialRecordAccessor
from fairprice.infrastructure.database.factory import create_store
from fairprice.infrastructure.database.snapshot_store import SnapshotTabularStore
from fairprice.infrastructure.database.sql_store import SqlTabularStore
from fairprice.infrastructure.database.store import Filter, StoreQueryError, TabularStore

__all__ = [
    "Filter",
    "FinancialRecordAccessor",
    "SnapshotTabularStore",
    "SqlTabularStore",
    "StoreQueryError",
    "TabularStore",
    "create_store",
]
