from __future__ import annotations

import dataclasses

import pytest

from tradelens.models import IngestReport, RunManifest, SheetView, TransactionRecord


def test_ingest_report_to_dict_returns_list_copies() -> None:
    report = IngestReport(
        sheets=2,
        rows_in=10,
        rows_out=8,
        dropped_rows=2,
        matched_fields=["symbol"],
        warnings=["bad row"],
    )

    payload = report.to_dict()
    payload["matched_fields"].append("value")
    payload["warnings"].append("another")

    assert report.matched_fields == ["symbol"]
    assert report.warnings == ["bad row"]


def test_ingest_report_rejects_negative_counts() -> None:
    with pytest.raises(ValueError, match="rows_in"):
        IngestReport(rows_in=-1)

    with pytest.raises(ValueError, match="sheets"):
        IngestReport(sheets=-1)


def test_ingest_report_rejects_inconsistent_row_relationships() -> None:
    with pytest.raises(ValueError, match="rows_out"):
        IngestReport(rows_in=2, rows_out=3)

    with pytest.raises(ValueError, match="dropped_rows"):
        IngestReport(rows_in=5, rows_out=4, dropped_rows=2)


def test_ingest_report_rejects_non_string_lists() -> None:
    with pytest.raises(TypeError, match="missing_fields"):
        IngestReport(missing_fields=["SYMBOL", 1])  # type: ignore[list-item]

    with pytest.raises(TypeError, match="warnings"):
        IngestReport(warnings="oops")  # type: ignore[arg-type]


def test_run_manifest_rejects_non_integer_counts() -> None:
    with pytest.raises(TypeError, match="records"):
        RunManifest(records=True)  # type: ignore[arg-type]

    with pytest.raises(ValueError, match="sheets"):
        RunManifest(sheets=-2)


def test_transaction_record_is_immutable() -> None:
    record = TransactionRecord(symbol="TCS", value=1.0)

    with pytest.raises(dataclasses.FrozenInstanceError):
        record.value = 2.0  # type: ignore[misc]

    assert record.to_dict()["num_securities"] == 0.0


def test_sheet_view_width_is_header_length() -> None:
    assert SheetView(headers=["a", None, "a"], rows=[[1]]).width == 3
