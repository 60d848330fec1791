from typing import Any, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from ..core.config import settings
from ..core.errors import UpstreamUnavailable


class ExpenseAnalyzer(Protocol):
    def analyze_expense(self, data: bytes) -> dict[str, Any]: ...


class TextractExpenseAnalyzer:
    """Runs AWS Textract AnalyzeExpense on raw document bytes."""

    def __init__(self, client: Optional[object] = None):
        self.client = client or boto3.client(
            "textract",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )

    def analyze_expense(self, data: bytes) -> dict[str, Any]:
        logger.info(f"Analyzing document of size {len(data)} bytes")
        try:
            response = self.client.analyze_expense(Document={"Bytes": data})
        except (ClientError, BotoCoreError) as e:
            logger.error("Error analysing expense", error=str(e))
            raise UpstreamUnavailable("textract", str(e)) from e

        documents = response.get("ExpenseDocuments") if isinstance(response, dict) else None
        logger.info(
            "Textract AnalyzeExpense completed",
            expense_documents=len(documents) if isinstance(documents, list) else None,
        )
        return response


def _field(field_type: str, text: str) -> dict[str, Any]:
    return {
        "Type": {"Text": field_type, "Confidence": 99.0},
        "ValueDetection": {"Text": text, "Confidence": 95.0},
        "PageNumber": 1,
    }


MOCK_ANALYSIS_RESULT: dict[str, Any] = {
    "DocumentMetadata": {"Pages": 1},
    "ExpenseDocuments": [
        {
            "ExpenseIndex": 1,
            "SummaryFields": [
                _field("VENDOR_NAME", "Contoso\nMarket"),
                _field("VENDOR_PHONE", "(555) 010-2300"),
                _field("INVOICE_RECEIPT_ID", "R-10023"),
                _field("INVOICE_RECEIPT_DATE", "2025-09-30"),
                _field("SUBTOTAL", "$36.50"),
                _field("TAX", "$3.65"),
                _field("TOTAL", "$40.15"),
            ],
            "LineItemGroups": [
                {
                    "LineItemGroupIndex": 1,
                    "LineItems": [
                        {"LineItemExpenseFields": [
                            _field("ITEM", "Organic\nBananas"),
                            _field("PRICE", "$4.50"),
                            _field("QUANTITY", "3"),
                        ]},
                        {"LineItemExpenseFields": [
                            _field("ITEM", "Coffee Beans 1kg"),
                            _field("PRICE", "$32.00"),
                            _field("QUANTITY", "1"),
                        ]},
                    ],
                }
            ],
        }
    ],
}


class MockExpenseAnalyzer:
    """Returns a canned AnalyzeExpense response (no AWS calls)."""

    def __init__(self, response: Optional[dict[str, Any]] = None):
        self.response = response if response is not None else MOCK_ANALYSIS_RESULT

    def analyze_expense(self, data: bytes) -> dict[str, Any]:
        logger.info(
            "Returning mock expense analysis",
            file_size_bytes=len(data or b""),
        )
        return self.response


def create_expense_analyzer() -> ExpenseAnalyzer:
    if settings.textract_enabled and settings.aws_configured:
        logger.info("Using AWS Textract for expense analysis", region=settings.aws_region)
        return TextractExpenseAnalyzer()

    logger.warning(
        "AWS Textract not configured - using MOCK data. "
        "Set AWS_REGION (and credentials) to use real analysis."
    )
    return MockExpenseAnalyzer()
