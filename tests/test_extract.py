"""Tests for header mapping, transaction extraction and ingestion outcomes."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from tradelens import HEADER_FIELD_MAP
from tradelens.errors import SchemaError
from tradelens.extract import canonical_header, extract_transactions, ingest_workbook, map_headers
from tradelens.models import SheetView, TransactionRecord

SYMBOL = "SYMBOL"
ACQUIRER = "NAME OF THE ACQUIRER/DISPOSER"
NUM = "NO. OF SECURITIES (ACQUIRED/DISCLOSED)"
VALUE = "VALUE OF SECURITY (ACQUIRED/DISCLOSED)"
TXN_TYPE = "ACQUISITION/DISPOSAL TRANSACTION TYPE"
DATE = "DATE OF ALLOTMENT/ACQUISITION FROM"


def test_canonical_header_trims_and_upper_cases() -> None:
    assert canonical_header("  Symbol \n") == "SYMBOL"
    assert canonical_header(None) == ""
    assert canonical_header(12) == "12"


def test_header_map_is_immutable() -> None:
    assert isinstance(HEADER_FIELD_MAP, MappingProxyType)
    with pytest.raises(TypeError):
        HEADER_FIELD_MAP["X"] = "symbol"  # type: ignore[index]


def test_map_headers_is_positional_and_ignores_unknown_labels() -> None:
    columns = map_headers([" symbol", "Other", "value of security (acquired/disclosed)"], HEADER_FIELD_MAP)

    assert columns == {0: "symbol", 2: "value"}


def test_map_headers_rejects_unknown_target_field() -> None:
    with pytest.raises(ValueError, match="unknown field"):
        map_headers(["X"], {"X": "price"})


def test_extracts_example_record_with_defaults() -> None:
    view = SheetView(headers=[SYMBOL, VALUE, TXN_TYPE], rows=[["TCS", "1,000", "Buy"]])

    records = extract_transactions(view)

    assert records == [
        TransactionRecord(
            symbol="TCS",
            acquirer_disposer=None,
            num_securities=0.0,
            value=1000.0,
            transaction_type="Buy",
            date=None,
        )
    ]


def test_two_recognised_headers_raise_schema_error() -> None:
    view = SheetView(headers=[SYMBOL, VALUE, "Comment"], rows=[["TCS", 1, "x"]])

    with pytest.raises(SchemaError) as excinfo:
        extract_transactions(view)

    assert excinfo.value.found == [SYMBOL, VALUE]
    assert TXN_TYPE in excinfo.value.missing
    assert excinfo.value.required == 3


def test_duplicate_known_headers_count_once() -> None:
    view = SheetView(headers=[SYMBOL, SYMBOL, VALUE], rows=[["A", "B", 1]])

    with pytest.raises(SchemaError):
        extract_transactions(view)


def test_header_only_sheet_yields_no_records_without_schema_check() -> None:
    assert extract_transactions(SheetView(headers=["foo"], rows=[])) == []


def test_row_filtering_rules() -> None:
    view = SheetView(
        headers=[SYMBOL, ACQUIRER, NUM, VALUE, TXN_TYPE, DATE],
        rows=[
            ["RELI", "Promoter", "2,500", "10,000.50", "Sell", "01-Jan-2024"],
            [None, None, None, None, None, None],  # nothing populated
            [None, "Someone", 5, 100, "Buy", "x"],  # no symbol
            ["", "Someone", 5, 100, "Buy", "x"],  # empty symbol
            ["NEG", "Someone", 5, "-1", "Buy", "x"],  # negative value
            ["NOVAL", "Someone", 5, None, "Buy", "x"],  # value absent
            ["ZERO", None, "abc", "n/a", None, None],  # malformed numbers read as 0
            ["SHORT", None, None, 7],  # short row
            [0, "Someone", 5, 100, "Buy", "x"],  # numeric zero symbol
            ["0", "Someone", 5, 100, "Buy", "x"],  # text zero symbol is kept
            ["UNITS", None, "25 shares", "1,000 INR", None, None],  # trailing text
        ],
    )

    records = extract_transactions(view)

    assert [r.symbol for r in records] == ["RELI", "ZERO", "SHORT", "0", "UNITS"]
    assert records[0].num_securities == 2500.0
    assert records[0].value == 10000.5
    assert records[0].date == "01-Jan-2024"
    assert records[1].value == 0.0
    assert records[1].num_securities == 0.0
    assert records[2].value == 7.0
    assert records[4].value == 1000.0
    assert records[4].num_securities == 25.0


def test_non_numeric_fields_keep_raw_cell_values() -> None:
    view = SheetView(headers=[SYMBOL, VALUE, DATE], rows=[[500325, 10, 45292]])

    (record,) = extract_transactions(view)

    assert record.symbol == 500325
    assert record.date == 45292


def test_custom_header_map_and_threshold() -> None:
    header_map = MappingProxyType({"TICKER": "symbol", "AMOUNT": "value"})
    view = SheetView(headers=["Ticker", "Amount"], rows=[["X", "5"]])

    records = extract_transactions(view, header_map, min_fields=2)

    assert records == [TransactionRecord(symbol="X", value=5.0)]


def test_ingest_schema_mismatch_keeps_raw_data() -> None:
    raw = {"Sheet1": [["a", "b"], [1, 2]], "Sheet2": [["c"], [3]]}

    result = ingest_workbook(raw)

    assert result.records == []
    assert isinstance(result.schema_error, SchemaError)
    assert result.raw_data == raw
    assert list(result.sheets) == ["Sheet1", "Sheet2"]
    assert result.status == "raw_only"
    assert result.report.rows_in == 1
    assert result.report.rows_out == 0
    assert result.report.dropped_rows == 1
    assert any("need 3" in w for w in result.report.warnings)


def test_ingest_empty_workbook_is_empty_not_error() -> None:
    result = ingest_workbook({})

    assert result.records == []
    assert result.raw_data == {}
    assert result.schema_error is None
    assert result.status == "empty"
    assert result.first_sheet is None


def test_ingest_reports_matched_fields_and_dropped_rows() -> None:
    raw = {
        "Data": [
            [SYMBOL, VALUE, TXN_TYPE],
            ["A", 1, "Buy"],
            [None, 2, "Buy"],
        ]
    }

    result = ingest_workbook(raw)

    assert result.status == "transactions"
    assert result.first_sheet == "Data"
    assert result.report.matched_fields == ["symbol", "value", "transaction_type"]
    assert result.report.missing_fields == [ACQUIRER, NUM, DATE]
    assert result.report.rows_in == 2
    assert result.report.rows_out == 1
    assert result.report.dropped_rows == 1
    assert any("Skipped 1 rows" in w for w in result.report.warnings)
