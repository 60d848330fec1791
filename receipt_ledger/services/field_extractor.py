from datetime import datetime, UTC
from typing import Any, Mapping

from loguru import logger
from pydantic import ValidationError

from .invoice_types import AnalysisResult, ExtractedInvoice, ExtractedLineItem
from ..core.errors import MalformedAnalysisResult

# Textract summary field type -> ExtractedInvoice attribute
SUMMARY_FIELD_MAP = {
    "VENDOR_NAME": "vendor_name",
    "TOTAL": "total",
    "INVOICE_RECEIPT_DATE": "invoice_date",
    "INVOICE_RECEIPT_ID": "invoice_id",
    "VENDOR_PHONE": "vendor_phone",
}

# Line item field type -> (attribute, collapse newlines)
LINE_ITEM_FIELD_MAP = {
    "ITEM": ("item", True),
    "PRICE": ("price", False),
    "QUANTITY": ("quantity", False),
}


def _single_line(text: str) -> str:
    return text.replace("\n", " ")


def parse_analysis_result(result: AnalysisResult | Mapping[str, Any]) -> AnalysisResult:
    """Validate a raw AnalyzeExpense response into an AnalysisResult."""
    if isinstance(result, AnalysisResult):
        return result
    try:
        return AnalysisResult.model_validate(result)
    except ValidationError as e:
        errors = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
            for err in e.errors()
        ]
        raise MalformedAnalysisResult("Analysis result is not an expense analysis", {"errors": errors}) from e


def extract(result: AnalysisResult | Mapping[str, Any], now: datetime | None = None) -> ExtractedInvoice:
    """
    Flatten an AnalyzeExpense response into one ExtractedInvoice.

    The first value seen for each summary field type wins, across all expense
    documents. Every line item of every group is kept, in encounter order,
    even when some of its fields are missing.

    Args:
        result: Raw response dict or an already parsed AnalysisResult
        now: Creation timestamp (defaults to the current UTC time)

    Returns:
        ExtractedInvoice

    Raises:
        MalformedAnalysisResult: the response is missing a required container
    """
    analysis = parse_analysis_result(result)

    summary: dict[str, str] = {}
    line_items: list[ExtractedLineItem] = []

    for document in analysis.expense_documents:
        for field in document.summary_fields:
            attribute = SUMMARY_FIELD_MAP.get(field.type_text)
            if attribute is None or attribute in summary:
                continue
            summary[attribute] = _single_line(field.value_text)

        for group in document.line_item_groups:
            for line_item in group.line_items:
                values: dict[str, str] = {}
                for field in line_item.expense_fields:
                    mapping = LINE_ITEM_FIELD_MAP.get(field.type_text)
                    if mapping is None:
                        continue
                    attribute, collapse = mapping
                    values[attribute] = _single_line(field.value_text) if collapse else field.value_text
                line_items.append(ExtractedLineItem(**values))

    invoice = ExtractedInvoice(
        **summary,
        line_items=tuple(line_items),
        created_at=now or datetime.now(UTC),
    )

    logger.debug(
        "Extracted expense fields",
        documents=len(analysis.expense_documents),
        vendor=invoice.vendor_name,
        total=invoice.total,
        line_items=len(line_items),
    )
    return invoice
