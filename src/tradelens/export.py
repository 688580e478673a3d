"""Excel export writer — produces ``Export_<name>.xlsx`` from extracted records."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from tradelens.models import TransactionRecord
from tradelens.utils import file_base_name

# ── Style constants ──────────────────────────────────────────────

HEADER_FONT = Font(name="Calibri", bold=True, size=11, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
HEADER_ALIGN = Alignment(horizontal="center", vertical="center", wrap_text=True)

INT_FMT = '#,##0'
CURRENCY_FMT = '#,##0.00'

SHEET_TITLE = "Transactions"

# (label, record field, column width, number format)
EXPORT_COLUMNS: tuple[tuple[str, str, int, str | None], ...] = (
    ("Symbol", "symbol", 15, None),
    ("Acquirer/Disposer", "acquirer_disposer", 40, None),
    ("No. of Securities", "num_securities", 20, INT_FMT),
    ("Value (INR)", "value", 20, CURRENCY_FMT),
    ("Transaction Type", "transaction_type", 15, None),
    ("Date", "date", 20, None),
)

_EXCEL_FORMULA_PREFIXES = ("=", "+", "-", "@")


# ── Helpers ──────────────────────────────────────────────────────


def export_file_name(file_name: str) -> str:
    """``"trades.xlsx"`` -> ``"Export_trades.xlsx"``."""
    return f"Export_{file_base_name(file_name)}.xlsx"


def _excel_value(val: Any) -> Any:
    if isinstance(val, str):
        if val.startswith("'"):
            return val
        stripped = val.lstrip()
        if stripped and stripped[0] in _EXCEL_FORMULA_PREFIXES:
            return f"'{val}"
    return val


def _style_header(ws: Worksheet, ncols: int) -> None:
    for c in range(1, ncols + 1):
        cell = ws.cell(row=1, column=c)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGN


def _write_records(ws: Worksheet, records: Sequence[TransactionRecord]) -> None:
    for c_idx, (label, _field, width, _fmt) in enumerate(EXPORT_COLUMNS, 1):
        ws.cell(row=1, column=c_idx, value=label)
        ws.column_dimensions[get_column_letter(c_idx)].width = width
    _style_header(ws, len(EXPORT_COLUMNS))

    for r_idx, record in enumerate(records, 2):
        for c_idx, (_label, field_name, _width, fmt) in enumerate(EXPORT_COLUMNS, 1):
            cell = ws.cell(row=r_idx, column=c_idx, value=_excel_value(getattr(record, field_name)))
            if fmt:
                cell.number_format = fmt

    ws.freeze_panes = "A2"
    if records:
        ws.auto_filter.ref = ws.dimensions


# ── Public API ───────────────────────────────────────────────────


def write_export(
    out_dir: Path,
    records: Sequence[TransactionRecord],
    file_name: str,
) -> Path:
    """Write the records (in the given order) to ``Export_<base>.xlsx``.

    Raises
    ------
    ValueError
        If *records* is empty; there is nothing to export.
    """
    if not records:
        raise ValueError("No records to export")

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    export_path = out_dir / export_file_name(file_name)

    wb = Workbook()
    ws = wb.active
    if ws is None:
        ws = wb.create_sheet()
    ws.title = SHEET_TITLE
    _write_records(ws, records)

    tmp_path = export_path.with_name(export_path.stem + ".tmp.xlsx")
    wb.save(tmp_path)
    tmp_path.replace(export_path)
    return export_path
