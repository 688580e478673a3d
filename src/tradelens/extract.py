"""Schema-driven transaction extraction from the first sheet."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from tradelens import HEADER_FIELD_MAP, MIN_MATCHED_FIELDS
from tradelens.errors import SchemaError
from tradelens.models import (
    RECORD_FIELDS,
    Cell,
    IngestReport,
    IngestStatus,
    RawWorkbook,
    SheetView,
    TransactionRecord,
)
from tradelens.numeric import to_number
from tradelens.sheets import cell_at, normalize_workbook

_NUMERIC_FIELDS = frozenset({"num_securities", "value"})

# ── Header mapping ──────────────────────────────────────────────


def canonical_header(label: Cell) -> str:
    """Trim and upper-case *label* for dictionary lookup."""
    if label is None:
        return ""
    return str(label).strip().upper()


def map_headers(headers: Sequence[Cell], header_map: Mapping[str, str]) -> dict[int, str]:
    """Return ``{column_index: field_name}`` for every recognised header."""
    columns: dict[int, str] = {}
    for index, label in enumerate(headers):
        field_name = header_map.get(canonical_header(label))
        if field_name is None:
            continue
        if field_name not in RECORD_FIELDS:
            raise ValueError(f"Header map targets unknown field {field_name!r}")
        columns[index] = field_name
    return columns


def _match_summary(
    columns: Mapping[int, str], header_map: Mapping[str, str]
) -> tuple[list[str], list[str]]:
    present = set(columns.values())
    matched = [f for f in dict.fromkeys(header_map.values()) if f in present]
    missing = [h for h, f in header_map.items() if f not in present]
    return matched, missing


# ── Row extraction ──────────────────────────────────────────────


def _build_record(row: Sequence[Cell], columns: Mapping[int, str]) -> TransactionRecord | None:
    values: dict[str, Cell] = {}
    # Later duplicate columns overwrite earlier ones.
    for index, field_name in columns.items():
        cell = cell_at(row, index)
        if cell is None:
            continue
        values[field_name] = to_number(cell) if field_name in _NUMERIC_FIELDS else cell

    if not values:
        return None
    symbol = values.get("symbol")
    # A numeric 0 symbol counts as missing; the text "0" does not.
    if symbol is None or symbol == "" or (isinstance(symbol, (int, float)) and symbol == 0):
        return None
    value = values.get("value")
    if not isinstance(value, float) or value < 0:
        return None
    return TransactionRecord(**values)  # type: ignore[arg-type]


def extract_transactions(
    view: SheetView,
    header_map: Mapping[str, str] = HEADER_FIELD_MAP,
    *,
    min_fields: int = MIN_MATCHED_FIELDS,
) -> list[TransactionRecord]:
    """Extract transaction records from a normalised first sheet.

    A sheet without data rows yields ``[]`` before any header check. Rows that
    populate no field, lack a symbol, or carry no non-negative value are
    skipped silently; malformed numeric cells read as ``0``.

    Raises
    ------
    SchemaError
        If fewer than *min_fields* known fields appear in the header row.
    """
    if not view.rows:
        return []

    columns = map_headers(view.headers, header_map)
    matched, missing = _match_summary(columns, header_map)
    if len(matched) < min_fields:
        found = [h for h, f in header_map.items() if f in matched]
        raise SchemaError(found=found, missing=missing, required=min_fields)

    records: list[TransactionRecord] = []
    for row in view.rows:
        record = _build_record(row, columns)
        if record is not None:
            records.append(record)
    return records


# ── Ingestion ───────────────────────────────────────────────────


@dataclass(frozen=True)
class IngestResult:
    """Outcome of one workbook load.

    Raw sheets are always kept, even when the first sheet fails the schema.
    """

    records: list[TransactionRecord] = field(default_factory=list)
    raw_data: RawWorkbook = field(default_factory=dict)
    sheets: dict[str, SheetView] = field(default_factory=dict)
    report: IngestReport = field(default_factory=IngestReport)
    schema_error: SchemaError | None = None

    @property
    def status(self) -> IngestStatus:
        if self.records:
            return "transactions"
        if self.raw_data:
            return "raw_only"
        return "empty"

    @property
    def first_sheet(self) -> str | None:
        return next(iter(self.sheets), None)


def ingest_workbook(
    raw: RawWorkbook,
    header_map: Mapping[str, str] = HEADER_FIELD_MAP,
    *,
    min_fields: int = MIN_MATCHED_FIELDS,
) -> IngestResult:
    """Normalise every sheet and extract transactions from the first one."""
    sheets = normalize_workbook(raw)
    if not sheets:
        report = IngestReport(warnings=["Workbook contains no sheets"])
        return IngestResult(records=[], raw_data={}, sheets={}, report=report)

    first = next(iter(sheets.values()))
    matched, missing = _match_summary(map_headers(first.headers, header_map), header_map)
    report = IngestReport(
        sheets=len(sheets),
        rows_in=len(first.rows),
        rows_out=len(first.rows),
        dropped_rows=0,
        matched_fields=matched,
        missing_fields=missing,
    )

    schema_error: SchemaError | None = None
    try:
        records = extract_transactions(first, header_map, min_fields=min_fields)
    except SchemaError as exc:
        schema_error = exc
        records = []
        report.warnings.append(str(exc))

    report.rows_out = len(records)
    report.dropped_rows = report.rows_in - report.rows_out
    if records and report.dropped_rows:
        report.warnings.append(
            f"Skipped {report.dropped_rows} rows without a symbol or a non-negative value"
        )
    if not records:
        report.warnings.append("No transaction data extracted; view the raw sheets instead")

    return IngestResult(
        records=records,
        raw_data=raw,
        sheets=sheets,
        report=report,
        schema_error=schema_error,
    )
