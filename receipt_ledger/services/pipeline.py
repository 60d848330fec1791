"""
Receipt processing pipeline.

Runs one upload through object storage, expense analysis, field extraction,
bill persistence and the stats increment, in that order. Storage, analysis and
malformed-response failures abort the remaining steps. An unparseable total
only skips the stats increment: the bill record has already been written and
the result carries a warning.
"""

import mimetypes
import uuid
from typing import Optional

from loguru import logger
from pydantic import BaseModel

from .aggregate_updater import AggregateUpdater
from .field_extractor import extract
from .invoice_types import ExtractedInvoice, StatsIncrement
from .object_storage import ObjectStorage
from .storage.base import BillStoreBase
from .textract import ExpenseAnalyzer
from ..core.errors import UnparseableTotal


class ProcessResult(BaseModel):
    bill_id: str
    storage_key: str
    invoice: ExtractedInvoice
    increment: StatsIncrement | None = None
    warning: str | None = None

    @property
    def stats_updated(self) -> bool:
        return self.increment is not None


def storage_key_for(content_type: Optional[str], token: Optional[str] = None) -> str:
    """Build '<token>.<ext>' with the extension guessed from the content type."""
    token = token or uuid.uuid4().hex
    extension = mimetypes.guess_extension(content_type or "") if content_type else None
    return f"{token}{extension or '.bin'}"


def new_bill_id() -> str:
    return uuid.uuid4().hex


class ReceiptPipeline:
    def __init__(
        self,
        storage: ObjectStorage,
        analyzer: ExpenseAnalyzer,
        bill_store: BillStoreBase,
        aggregate_updater: AggregateUpdater,
    ):
        self.storage = storage
        self.analyzer = analyzer
        self.bill_store = bill_store
        self.aggregate_updater = aggregate_updater

    def process(self, data: bytes, content_type: Optional[str]) -> ProcessResult:
        """
        Process one uploaded receipt.

        Args:
            data: Uploaded file bytes
            content_type: Upload content type, used only for the storage key extension

        Returns:
            ProcessResult with the stored bill id and extracted invoice

        Raises:
            UpstreamUnavailable: storage, analysis or bill store call failed
            MalformedAnalysisResult: the analysis response has the wrong shape
        """
        storage_key = storage_key_for(content_type)
        self.storage.put(storage_key, data, content_type or "application/octet-stream")
        document = self.storage.get(storage_key)

        analysis = self.analyzer.analyze_expense(document)
        invoice = extract(analysis)
        logger.info(
            "Extracted receipt fields",
            storage_key=storage_key,
            vendor=invoice.vendor_name,
            total=invoice.total,
            line_items=len(invoice.line_items),
        )

        bill_id = new_bill_id()
        self.bill_store.put_bill(bill_id, invoice)
        logger.info("Bill record written", bill_id=bill_id)

        result = ProcessResult(bill_id=bill_id, storage_key=storage_key, invoice=invoice)
        try:
            result.increment = self.aggregate_updater.apply(invoice)
        except UnparseableTotal as e:
            logger.warning("Stats not updated", bill_id=bill_id, reason=e.message)
            result.warning = e.message
        return result
