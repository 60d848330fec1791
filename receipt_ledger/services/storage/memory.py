"""
In-memory bill and stats storage (for demo and tests).
In production, use the SQLite stores or a managed database.
"""
from datetime import datetime, UTC
from decimal import Decimal
from threading import Lock
from typing import Dict, Optional

from .base import BillStoreBase, StatsStoreBase
from ..invoice_types import ExtractedInvoice, StatsAggregate


class InMemoryBillStore(BillStoreBase):
    def __init__(self):
        self._bills: Dict[str, dict] = {}

    def put_bill(self, bill_id: str, invoice: ExtractedInvoice) -> None:
        """Store a bill record, replacing any record with the same id"""
        self._bills[bill_id] = {
            "id": bill_id,
            "invoice": invoice.to_record(),
            "stored_at": datetime.now(UTC).isoformat(),
        }

    def get_bill(self, bill_id: str) -> Optional[dict]:
        """Get bill record by ID"""
        return self._bills.get(bill_id)

    def list_bills(self) -> list:
        """List all bills, newest first"""
        return sorted(self._bills.values(), key=lambda b: b["stored_at"], reverse=True)

    def clear(self) -> None:
        self._bills.clear()


class InMemoryStatsStore(StatsStoreBase):
    def __init__(self):
        self._lock = Lock()
        self._total_amount = Decimal("0")
        self._total_bills = 0

    def increment_stats(self, amount_delta: float, bill_delta: int) -> None:
        """Add deltas under a lock so concurrent requests never lose an update"""
        with self._lock:
            self._total_amount += Decimal(str(amount_delta))
            self._total_bills += bill_delta

    def get_stats(self) -> StatsAggregate:
        with self._lock:
            return StatsAggregate(total_amount=float(self._total_amount), total_bills=self._total_bills)

    def reset(self) -> None:
        with self._lock:
            self._total_amount = Decimal("0")
            self._total_bills = 0
