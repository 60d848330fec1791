"""
Abstract base classes for bill record and stats storage.

Defines the interfaces the pipeline writes through, enabling dependency
injection and easy swapping of storage backends.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..invoice_types import ExtractedInvoice, StatsAggregate


class BillStoreBase(ABC):
    """
    Per-bill record storage.

    Implementations can use:
    - In-memory storage (for testing/demo)
    - SQLite (for single-instance deployments)
    - Firestore / DynamoDB (for cloud deployments)
    """

    @abstractmethod
    def put_bill(self, bill_id: str, invoice: ExtractedInvoice) -> None:
        """
        Store an extracted invoice under the given id.

        Args:
            bill_id: Unique bill identifier
            invoice: Extracted invoice to persist verbatim
        """
        pass

    @abstractmethod
    def get_bill(self, bill_id: str) -> Optional[dict]:
        """
        Get a stored bill by ID.

        Returns:
            Dictionary with keys:
                - id: Bill ID
                - invoice: ExtractedInvoice.to_record() output
                - stored_at: ISO timestamp
            Returns None if not found.
        """
        pass

    @abstractmethod
    def list_bills(self) -> list:
        """
        List all stored bills, newest first.

        Returns:
            List of bill dictionaries (same format as get_bill)
        """
        pass


class StatsStoreBase(ABC):
    """
    Running totals across all bills.

    Increments must be applied atomically by the store; callers never read
    the current value before writing.
    """

    @abstractmethod
    def increment_stats(self, amount_delta: float, bill_delta: int) -> None:
        """
        Add to the running total amount and bill count.

        Args:
            amount_delta: Amount to add to total_amount
            bill_delta: Count to add to total_bills
        """
        pass

    @abstractmethod
    def get_stats(self) -> StatsAggregate:
        """Return the current running totals."""
        pass
