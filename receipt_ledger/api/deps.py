from functools import lru_cache

from pydantic import BaseModel

from ..services.aggregate_updater import AggregateUpdater
from ..services.invoice_types import ExtractedInvoice, StatsIncrement
from ..services.object_storage import create_object_storage
from ..services.pipeline import ReceiptPipeline
from ..services.storage import bill_store, stats_store
from ..services.textract import create_expense_analyzer


class UploadResponse(BaseModel):
    bill_id: str
    invoice: dict  # ExtractedInvoice.to_record() output
    increment: StatsIncrement | None = None
    stats_updated: bool
    warning: str | None = None  # Set when the total could not be parsed


class StatsResponse(BaseModel):
    total_amount: float
    total_bills: int


@lru_cache
def get_pipeline() -> ReceiptPipeline:
    """Build the pipeline once from settings; tests override this dependency."""
    return ReceiptPipeline(
        storage=create_object_storage(),
        analyzer=create_expense_analyzer(),
        bill_store=bill_store,
        aggregate_updater=AggregateUpdater(stats_store),
    )


def get_bill_store():
    return bill_store


def get_stats_store():
    return stats_store


def to_upload_response(bill_id: str, invoice: ExtractedInvoice, increment: StatsIncrement | None, warning: str | None) -> UploadResponse:
    return UploadResponse(
        bill_id=bill_id,
        invoice=invoice.to_record(),
        increment=increment,
        stats_updated=increment is not None,
        warning=warning,
    )
