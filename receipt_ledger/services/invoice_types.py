"""
Types for Textract AnalyzeExpense responses and the records extracted from them.

Only the parts of the response that field extraction reads are modelled.
Everything else (geometry, confidences, metadata) is ignored.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _TextractModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class Detection(_TextractModel):
    text: str | None = Field(default=None, alias="Text")


class ExpenseField(_TextractModel):
    """One {type, text} pair as Textract reports it."""

    type: Detection | None = Field(default=None, alias="Type")
    value_detection: Detection | None = Field(default=None, alias="ValueDetection")

    @property
    def type_text(self) -> str | None:
        return self.type.text if self.type else None

    @property
    def value_text(self) -> str:
        if self.value_detection is None or self.value_detection.text is None:
            return ""
        return self.value_detection.text


class LineItem(_TextractModel):
    expense_fields: list[ExpenseField] = Field(alias="LineItemExpenseFields")


class LineItemGroup(_TextractModel):
    line_items: list[LineItem] = Field(alias="LineItems")


class ExpenseDocument(_TextractModel):
    summary_fields: list[ExpenseField] = Field(alias="SummaryFields")
    line_item_groups: list[LineItemGroup] = Field(alias="LineItemGroups")


class AnalysisResult(_TextractModel):
    expense_documents: list[ExpenseDocument] = Field(alias="ExpenseDocuments")


class ExtractedLineItem(BaseModel):
    """One purchased row. Keys the analysis did not report stay None."""

    model_config = ConfigDict(frozen=True)

    item: str | None = None
    price: str | None = None
    quantity: str | None = None


class ExtractedInvoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    invoice_id: str = "N/A"
    vendor_name: str = "N/A"
    vendor_phone: str = "N/A"
    invoice_date: str = "N/A"
    total: str = "0"  # Raw text, parsed only when aggregating
    line_items: tuple[ExtractedLineItem, ...] = ()
    created_at: datetime

    def to_record(self) -> dict:
        """Serialize for persistence, leaving out line item keys that were never set."""
        record = self.model_dump(mode="json", exclude={"line_items"})
        record["line_items"] = [item.model_dump(exclude_none=True) for item in self.line_items]
        return record


class StatsIncrement(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount_delta: float
    bill_delta: int = 1


class StatsAggregate(BaseModel):
    total_amount: float = 0.0
    total_bills: int = 0
