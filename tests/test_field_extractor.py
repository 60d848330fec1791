"""
Unit tests for field extraction from Textract AnalyzeExpense responses.
"""

from datetime import datetime, UTC

import pytest
from pydantic import ValidationError

from receipt_ledger.core.errors import MalformedAnalysisResult
from receipt_ledger.services.field_extractor import extract, parse_analysis_result
from receipt_ledger.services.invoice_types import AnalysisResult, ExtractedLineItem
from receipt_ledger.services.textract import MOCK_ANALYSIS_RESULT

FIXED_NOW = datetime(2025, 10, 1, 12, 0, tzinfo=UTC)


class TestDefaults:
    def test_zero_documents_gives_default_record(self):
        invoice = extract({"ExpenseDocuments": []})

        assert invoice.invoice_id == "N/A"
        assert invoice.vendor_name == "N/A"
        assert invoice.vendor_phone == "N/A"
        assert invoice.invoice_date == "N/A"
        assert invoice.total == "0"
        assert invoice.line_items == ()
        assert invoice.created_at is not None

    def test_unset_fields_keep_defaults(self, expense_document):
        result = {"ExpenseDocuments": [expense_document(summary=[("TOTAL", "12.00")])]}

        invoice = extract(result)

        assert invoice.total == "12.00"
        assert invoice.vendor_name == "N/A"
        assert invoice.invoice_id == "N/A"


class TestSummaryFields:
    def test_all_mapped_types(self, expense_document):
        result = {"ExpenseDocuments": [expense_document(summary=[
            ("VENDOR_NAME", "Acme"),
            ("TOTAL", "$5.00"),
            ("INVOICE_RECEIPT_DATE", "2025-01-02"),
            ("INVOICE_RECEIPT_ID", "R-1"),
            ("VENDOR_PHONE", "555-0100"),
        ])]}

        invoice = extract(result)

        assert invoice.vendor_name == "Acme"
        assert invoice.total == "$5.00"
        assert invoice.invoice_date == "2025-01-02"
        assert invoice.invoice_id == "R-1"
        assert invoice.vendor_phone == "555-0100"

    def test_first_match_wins_within_document(self, expense_document):
        result = {"ExpenseDocuments": [expense_document(summary=[("TOTAL", "10.00"), ("TOTAL", "20.00")])]}

        assert extract(result).total == "10.00"

    def test_first_match_wins_across_documents(self, expense_document):
        result = {"ExpenseDocuments": [
            expense_document(summary=[("TOTAL", "10.00")]),
            expense_document(summary=[("TOTAL", "20.00"), ("VENDOR_NAME", "Second")]),
        ]}

        invoice = extract(result)

        assert invoice.total == "10.00"
        # Fields unset in the first document are still taken from later ones
        assert invoice.vendor_name == "Second"

    def test_newlines_collapsed_in_summary_fields(self, expense_document):
        result = {"ExpenseDocuments": [expense_document(summary=[
            ("VENDOR_NAME", "Foo\nBar"),
            ("INVOICE_RECEIPT_DATE", "01/02\n2025"),
            ("TOTAL", "$1\n.00"),
        ])]}

        invoice = extract(result)

        assert invoice.vendor_name == "Foo Bar"
        assert invoice.invoice_date == "01/02 2025"
        assert invoice.total == "$1 .00"

    def test_unrecognized_types_ignored(self, expense_document):
        result = {"ExpenseDocuments": [expense_document(summary=[
            ("SUBTOTAL", "9.00"),
            ("TAX", "1.00"),
            ("OTHER", "x"),
        ])]}

        invoice = extract(result)

        assert invoice.total == "0"
        assert invoice.vendor_name == "N/A"

    def test_field_without_type_is_ignored(self):
        result = {"ExpenseDocuments": [{
            "SummaryFields": [{"ValueDetection": {"Text": "orphan"}}],
            "LineItemGroups": [],
        }]}

        assert extract(result).vendor_name == "N/A"

    def test_recognized_field_without_value_is_empty_text(self):
        result = {"ExpenseDocuments": [{
            "SummaryFields": [{"Type": {"Text": "VENDOR_NAME"}}],
            "LineItemGroups": [],
        }]}

        assert extract(result).vendor_name == ""


class TestLineItems:
    def test_price_is_not_normalized(self, expense_document):
        result = {"ExpenseDocuments": [expense_document(groups=[[[("ITEM", "Tea\nBags"), ("PRICE", "12.50\n")]]])]}

        item = extract(result).line_items[0]

        assert item.item == "Tea Bags"
        assert item.price == "12.50\n"

    def test_partial_line_item_is_kept(self, expense_document):
        result = {"ExpenseDocuments": [expense_document(groups=[[[("ITEM", "Widget"), ("PRICE", "$3")]]])]}

        items = extract(result).line_items

        assert items == (ExtractedLineItem(item="Widget", price="$3"),)
        assert items[0].quantity is None

    def test_line_item_with_no_known_fields_is_kept(self, expense_document):
        result = {"ExpenseDocuments": [expense_document(groups=[[[("EXPENSE_ROW", "row text")]]])]}

        assert extract(result).line_items == (ExtractedLineItem(),)

    def test_count_and_order_across_groups_and_documents(self, expense_document):
        result = {"ExpenseDocuments": [
            expense_document(groups=[
                [[("ITEM", "a")], [("ITEM", "b")]],
                [[("ITEM", "c")]],
            ]),
            expense_document(groups=[[[("ITEM", "d")], [("ITEM", "a")]]]),
        ]}

        items = extract(result).line_items

        assert [i.item for i in items] == ["a", "b", "c", "d", "a"]

    def test_to_record_omits_missing_keys(self, expense_document):
        result = {"ExpenseDocuments": [expense_document(groups=[[[("ITEM", "Widget"), ("PRICE", "$3")]]])]}

        record = extract(result).to_record()

        assert record["line_items"] == [{"item": "Widget", "price": "$3"}]


class TestMalformedInput:
    @pytest.mark.parametrize("result", [
        None,
        [],
        "ExpenseDocuments",
        {},
        {"ExpenseDocuments": None},
        {"ExpenseDocuments": {"not": "a list"}},
        {"ExpenseDocuments": [{"LineItemGroups": []}]},
        {"ExpenseDocuments": [{"SummaryFields": [], }]},
        {"ExpenseDocuments": [{"SummaryFields": 5, "LineItemGroups": []}]},
        {"ExpenseDocuments": [{"SummaryFields": ["TOTAL"], "LineItemGroups": []}]},
        {"ExpenseDocuments": [{"SummaryFields": [], "LineItemGroups": [{}]}]},
        {"ExpenseDocuments": [{"SummaryFields": [], "LineItemGroups": [{"LineItems": [{}]}]}]},
        {"ExpenseDocuments": [{"SummaryFields": [{"Type": "TOTAL"}], "LineItemGroups": []}]},
    ])
    def test_shape_violations_raise(self, result):
        with pytest.raises(MalformedAnalysisResult):
            extract(result)

    def test_error_lists_locations(self):
        with pytest.raises(MalformedAnalysisResult) as exc_info:
            extract({"ExpenseDocuments": [{"SummaryFields": []}]})

        locations = [e["loc"] for e in exc_info.value.details["errors"]]
        assert "ExpenseDocuments.0.LineItemGroups" in locations


def test_extract_is_pure(acme_result):
    first = extract(acme_result, now=FIXED_NOW)
    second = extract(acme_result, now=FIXED_NOW)

    assert first == second
    assert first.model_dump() == second.model_dump()


def test_extracted_invoice_is_immutable(acme_result):
    invoice = extract(acme_result, now=FIXED_NOW)

    assert isinstance(invoice.line_items, tuple)
    with pytest.raises(AttributeError):
        invoice.line_items.append(ExtractedLineItem(item="x"))
    with pytest.raises(ValidationError):
        invoice.total = "$1.00"

    assert len(invoice.line_items) == 1
    assert invoice.total == "$100.00"


def test_accepts_parsed_analysis_result(acme_result):
    parsed = parse_analysis_result(acme_result)

    assert isinstance(parsed, AnalysisResult)
    assert parse_analysis_result(parsed) is parsed
    assert extract(parsed, now=FIXED_NOW) == extract(acme_result, now=FIXED_NOW)


def test_end_to_end_acme_record(acme_result):
    invoice = extract(acme_result, now=FIXED_NOW)

    assert invoice.vendor_name == "Acme Co"
    assert invoice.total == "$100.00"
    assert invoice.invoice_id == "N/A"
    assert invoice.invoice_date == "N/A"
    assert invoice.vendor_phone == "N/A"
    assert invoice.line_items == (ExtractedLineItem(item="Widget", price="$10", quantity="2"),)
    assert invoice.created_at == FIXED_NOW


def test_mock_analysis_result_extracts():
    invoice = extract(MOCK_ANALYSIS_RESULT)

    assert invoice.vendor_name == "Contoso Market"
    assert invoice.total == "$40.15"
    assert len(invoice.line_items) == 2
    assert invoice.line_items[0].item == "Organic Bananas"
