"""
Exceptions raised while processing an uploaded receipt.

The pipeline lets these propagate; the HTTP layer maps each one to a status code.
"""

from typing import Any, Optional


class ReceiptLedgerError(Exception):
    """Base exception for all receipt ledger errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class MalformedAnalysisResult(ReceiptLedgerError):
    """The analysis response does not have the expense document shape."""

    pass


class UnparseableTotal(ReceiptLedgerError):
    """The extracted total contains no numeric token."""

    def __init__(self, total: str) -> None:
        super().__init__(f"No numeric amount found in total {total!r}", {"total": total})
        self.total = total


class UpstreamUnavailable(ReceiptLedgerError):
    """A storage, analysis or persistence call failed."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service} call failed: {message}", {"service": service})
        self.service = service
