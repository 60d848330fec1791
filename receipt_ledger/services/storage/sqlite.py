"""
SQLite-based bill and stats storage.

Provides persistent storage of extracted bills and the running stats row.
Stats are updated with a single UPDATE statement per bill, so concurrent
increments are serialized by SQLite's own locking.
"""

import json
import sqlite3
from datetime import datetime, UTC
from typing import Optional

from .base import BillStoreBase, StatsStoreBase
from ..invoice_types import ExtractedInvoice, StatsAggregate
from ...core.errors import UpstreamUnavailable


class _SQLiteStore:
    """Shared connection handling for the SQLite stores."""

    def __init__(self, db_path: str = "receipts.db"):
        """
        Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (default: receipts.db)
        """
        self.db_path = db_path
        self._init_database()

    def _init_database(self):
        """Create bills and stats tables if they don't exist"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS bills (
                id TEXT PRIMARY KEY,
                vendor_name TEXT NOT NULL,
                total TEXT NOT NULL,
                invoice TEXT NOT NULL,
                stored_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_bills_stored_at
            ON bills(stored_at)
        """)

        # Single row holding the running totals
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS stats (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                total_amount REAL NOT NULL DEFAULT 0,
                total_bills INTEGER NOT NULL DEFAULT 0
            )
        """)

        cursor.execute("""
            INSERT OR IGNORE INTO stats (id, total_amount, total_bills)
            VALUES (1, 0, 0)
        """)

        conn.commit()
        conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn


class SQLiteBillStore(_SQLiteStore, BillStoreBase):
    def put_bill(self, bill_id: str, invoice: ExtractedInvoice) -> None:
        """
        Insert (or replace) a bill record.

        Raises:
            UpstreamUnavailable: the database write failed
        """
        stored_at = datetime.now(UTC).isoformat()
        try:
            conn = self._get_connection()
            try:
                conn.execute("""
                    INSERT OR REPLACE INTO bills (id, vendor_name, total, invoice, stored_at)
                    VALUES (?, ?, ?, ?, ?)
                """, (bill_id, invoice.vendor_name, invoice.total, json.dumps(invoice.to_record()), stored_at))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise UpstreamUnavailable("bill store", str(e)) from e

    def get_bill(self, bill_id: str) -> Optional[dict]:
        """
        Raises:
            UpstreamUnavailable: the database read failed
        """
        try:
            conn = self._get_connection()
            try:
                row = conn.execute("""
                    SELECT id, invoice, stored_at
                    FROM bills
                    WHERE id = ?
                """, (bill_id,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise UpstreamUnavailable("bill store", str(e)) from e

        if row is None:
            return None
        return self._row_to_bill(row)

    def list_bills(self) -> list:
        try:
            conn = self._get_connection()
            try:
                rows = conn.execute("""
                    SELECT id, invoice, stored_at
                    FROM bills
                    ORDER BY stored_at DESC
                """).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise UpstreamUnavailable("bill store", str(e)) from e

        return [self._row_to_bill(row) for row in rows]

    @staticmethod
    def _row_to_bill(row: sqlite3.Row) -> dict:
        return {
            "id": row["id"],
            "invoice": json.loads(row["invoice"]),
            "stored_at": row["stored_at"],
        }


class SQLiteStatsStore(_SQLiteStore, StatsStoreBase):
    def increment_stats(self, amount_delta: float, bill_delta: int) -> None:
        """
        Add deltas to the stats row in one statement.

        Raises:
            UpstreamUnavailable: the database write failed
        """
        try:
            conn = self._get_connection()
            try:
                conn.execute("""
                    UPDATE stats
                    SET total_amount = ROUND(total_amount + ?, 2),
                        total_bills = total_bills + ?
                    WHERE id = 1
                """, (amount_delta, bill_delta))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise UpstreamUnavailable("stats store", str(e)) from e

    def get_stats(self) -> StatsAggregate:
        try:
            conn = self._get_connection()
            try:
                row = conn.execute("SELECT total_amount, total_bills FROM stats WHERE id = 1").fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise UpstreamUnavailable("stats store", str(e)) from e

        return StatsAggregate(total_amount=row["total_amount"], total_bills=row["total_bills"])
