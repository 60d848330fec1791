"""
Running statistics for processed bills.

Every extracted bill adds its full total (rounded to cents) to the running
amount and one to the bill count. Both go to the stats store as a single
commutative increment, so concurrent uploads never read-modify-write.
"""

import re
from decimal import Decimal, ROUND_HALF_UP

from loguru import logger

from .invoice_types import ExtractedInvoice, StatsIncrement
from .storage.base import StatsStoreBase
from ..core.errors import UnparseableTotal

AMOUNT_PATTERN = re.compile(r"[+-]?\d+(\.\d+)?")
CENTS = Decimal("0.01")


def parse_total(total: str) -> Decimal:
    """
    Return the first signed decimal number in the total text, rounded to cents.

    Rounding is half away from zero on the exact decimal text, so "45.005"
    becomes 45.01 rather than suffering binary float error.

    Raises:
        UnparseableTotal: no number appears in the text
    """
    match = AMOUNT_PATTERN.search(total or "")
    if match is None:
        raise UnparseableTotal(total)
    return Decimal(match.group(0)).quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_increment(invoice: ExtractedInvoice) -> StatsIncrement:
    amount = parse_total(invoice.total)
    return StatsIncrement(amount_delta=float(amount), bill_delta=1)


class AggregateUpdater:
    """Applies per-bill increments to an injected stats store."""

    def __init__(self, stats_store: StatsStoreBase):
        self.stats_store = stats_store

    def apply(self, invoice: ExtractedInvoice) -> StatsIncrement:
        """
        Compute the increment for a bill and send it to the stats store.

        Raises:
            UnparseableTotal: the store is left untouched
        """
        increment = compute_increment(invoice)
        self.stats_store.increment_stats(increment.amount_delta, increment.bill_delta)
        logger.info(
            "Stats incremented",
            amount_delta=increment.amount_delta,
            bill_delta=increment.bill_delta,
        )
        return increment
