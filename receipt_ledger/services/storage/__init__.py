"""
Bill record and stats stores.

The module-level stores are chosen by RECORD_STORE (memory or sqlite).
"""

from .base import BillStoreBase, StatsStoreBase
from .memory import InMemoryBillStore, InMemoryStatsStore
from .sqlite import SQLiteBillStore, SQLiteStatsStore
from ...core.config import settings


def create_stores(backend: str | None = None, db_path: str | None = None) -> tuple[BillStoreBase, StatsStoreBase]:
    """
    Build a bill store and stats store pair.

    Args:
        backend: "memory" or "sqlite" (default: RECORD_STORE)
        db_path: SQLite file path (default: RECORD_DB_PATH)
    """
    backend = backend or settings.record_store
    if backend == "sqlite":
        path = db_path or settings.record_db_path
        return SQLiteBillStore(path), SQLiteStatsStore(path)
    if backend == "memory":
        return InMemoryBillStore(), InMemoryStatsStore()
    raise ValueError(f"Unknown record store backend: {backend}")


# Global instances (in production, use dependency injection)
bill_store, stats_store = create_stores()

__all__ = [
    "BillStoreBase",
    "StatsStoreBase",
    "InMemoryBillStore",
    "InMemoryStatsStore",
    "SQLiteBillStore",
    "SQLiteStatsStore",
    "create_stores",
    "bill_store",
    "stats_store",
]
