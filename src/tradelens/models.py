"""Data models / typed containers used across the package."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any, Literal, Union

Cell = Union[str, int, float, None]
CellMatrix = list[list[Cell]]
RawWorkbook = dict[str, CellMatrix]

NOT_APPLICABLE = "N/A"
IngestStatus = Literal["transactions", "raw_only", "empty"]


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


# ── Sheets ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class SheetView:
    """One sheet split into its header row and data rows.

    Rows may be shorter than ``headers``; a missing trailing cell reads as
    ``None``. Header labels are not unique, so columns are addressed by index.
    """

    headers: list[Cell] = field(default_factory=list)
    rows: list[list[Cell]] = field(default_factory=list)

    @property
    def width(self) -> int:
        return len(self.headers)


# ── Transactions ─────────────────────────────────────────────────


@dataclass(frozen=True)
class TransactionRecord:
    symbol: Cell
    acquirer_disposer: Cell = None
    num_securities: float = 0.0
    value: float = 0.0
    transaction_type: Cell = None
    date: Cell = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "acquirer_disposer": self.acquirer_disposer,
            "num_securities": self.num_securities,
            "value": self.value,
            "transaction_type": self.transaction_type,
            "date": self.date,
        }


RECORD_FIELDS: tuple[str, ...] = (
    "symbol",
    "acquirer_disposer",
    "num_securities",
    "value",
    "transaction_type",
    "date",
)


@dataclass(frozen=True)
class SummaryEntry:
    symbol: Cell
    total_value: float


# ── Aggregates ───────────────────────────────────────────────────


@dataclass(frozen=True)
class ColumnStats:
    sum: float = 0.0
    count: int = 0
    average: float = 0.0


@dataclass(frozen=True)
class RatioResult:
    """Ratio of two selected columns; ``result`` is ``"N/A"`` on a zero denominator."""

    numerator: int
    denominator: int
    result: float | str


# ── Reports ──────────────────────────────────────────────────────


@dataclass
class IngestReport:
    """Quality report for one ingestion of the first sheet.

    Contract invariant: ``dropped_rows == rows_in - rows_out``.
    """

    sheets: int = 0
    rows_in: int = 0
    rows_out: int = 0
    dropped_rows: int = 0
    matched_fields: list[str] = field(default_factory=list)
    missing_fields: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.sheets = _to_non_negative_int(self.sheets, "sheets")
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.rows_out = _to_non_negative_int(self.rows_out, "rows_out")
        self.dropped_rows = _to_non_negative_int(self.dropped_rows, "dropped_rows")
        self.matched_fields = _to_string_list(self.matched_fields, "matched_fields")
        self.missing_fields = _to_string_list(self.missing_fields, "missing_fields")
        self.warnings = _to_string_list(self.warnings, "warnings")
        if self.rows_out > self.rows_in:
            raise ValueError("rows_out must be <= rows_in")
        if self.dropped_rows != self.rows_in - self.rows_out:
            raise ValueError("dropped_rows must equal rows_in - rows_out")

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheets": self.sheets,
            "rows_in": self.rows_in,
            "rows_out": self.rows_out,
            "dropped_rows": self.dropped_rows,
            "matched_fields": list(self.matched_fields),
            "missing_fields": list(self.missing_fields),
            "warnings": list(self.warnings),
        }


@dataclass
class RunManifest:
    """Audit-trail manifest for a single CLI run."""

    tool: str = "tradelens"
    version: str = ""
    input_path: str = ""
    output_dir: str = ""
    created_at_utc: str = ""
    status: str = "success"
    records: int = 0
    sheets: int = 0
    sha256: str = ""
    error_message: str = ""

    def __post_init__(self) -> None:
        self.records = _to_non_negative_int(self.records, "records")
        self.sheets = _to_non_negative_int(self.sheets, "sheets")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "input_path": self.input_path,
            "output_dir": self.output_dir,
            "created_at_utc": self.created_at_utc,
            "status": self.status,
            "records": self.records,
            "sheets": self.sheets,
            "sha256": self.sha256,
            "error_message": self.error_message,
        }
