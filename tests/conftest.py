"""
Pytest configuration.

Registers the integration marker and provides builders for Textract
AnalyzeExpense responses.
"""

import pytest


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against real AWS resources"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring real AWS resources"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def _field(field_type, text):
    return {"Type": {"Text": field_type}, "ValueDetection": {"Text": text}}


def _document(summary=(), groups=()):
    return {
        "SummaryFields": [_field(t, v) for t, v in summary],
        "LineItemGroups": [
            {"LineItems": [{"LineItemExpenseFields": [_field(t, v) for t, v in item]} for item in group]}
            for group in groups
        ],
    }


@pytest.fixture
def field():
    """Build one Textract expense field: field("TOTAL", "$1.00")"""
    return _field


@pytest.fixture
def expense_document():
    """
    Build one expense document.

    summary: [(type, text), ...]
    groups: [[[(type, text), ...] per line item] per group]
    """
    return _document


@pytest.fixture
def acme_result():
    """One document: Acme Co receipt with a single Widget line"""
    return {
        "ExpenseDocuments": [
            _document(
                summary=[("VENDOR_NAME", "Acme\nCo"), ("TOTAL", "$100.00")],
                groups=[[[("ITEM", "Widget"), ("PRICE", "$10"), ("QUANTITY", "2")]]],
            )
        ]
    }
