"""I/O helpers — decode workbooks into cell matrices, write JSON artifacts."""

from __future__ import annotations

import json
from datetime import date, datetime, time
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, cast

import pandas as pd

from tradelens.errors import DecodeError
from tradelens.models import Cell, CellMatrix, RawWorkbook

CSV_SHEET_NAME = "Sheet1"
EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xltx", ".xltm")
SUPPORTED_SUFFIXES = (".csv", ".xls", *EXCEL_SUFFIXES)

# ── Cell conversion ──────────────────────────────────────────────


def _to_cell(value: Any) -> Cell:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return str(value)

    if isinstance(value, (pd.Timestamp, datetime)):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()

    item = getattr(value, "item", None)
    if callable(item):
        value = item()

    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (str, int, float)):
        return value
    return str(value)


def frame_to_matrix(df: pd.DataFrame) -> CellMatrix:
    """Turn a header-less DataFrame into rows of plain Python cells.

    Every row keeps the frame's full width; missing cells are ``None``.
    """
    return [
        [_to_cell(val) for val in row_vals]
        for row_vals in df.itertuples(index=False, name=None)
    ]


# ── Decoding ─────────────────────────────────────────────────────


def _read_csv(buffer: bytes, delimiter: str) -> RawWorkbook:
    last_exc: Exception | None = None
    for encoding in ("utf-8-sig", "utf-8", "latin-1"):
        try:
            df = pd.read_csv(
                BytesIO(buffer),
                header=None,
                dtype="string",
                sep=delimiter,
                encoding=encoding,
                encoding_errors="strict",
                keep_default_na=False,
                na_values=[""],
                skip_blank_lines=False,
            )
        except pd.errors.EmptyDataError:
            return {CSV_SHEET_NAME: []}
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            last_exc = exc
            continue
        return {CSV_SHEET_NAME: frame_to_matrix(df)}
    raise DecodeError("Could not read CSV (decode or parse failed)") from last_exc


def _read_excel(buffer: bytes, engine: str) -> RawWorkbook:
    read_excel = cast(Callable[..., dict[str, pd.DataFrame]], getattr(pd, "read_excel"))
    sheets = read_excel(
        BytesIO(buffer),
        sheet_name=None,
        header=None,
        dtype=object,
        engine=engine,
    )
    return {str(name): frame_to_matrix(df) for name, df in sheets.items()}


def decode_workbook(buffer: bytes, suffix: str, delimiter: str = ",") -> RawWorkbook:
    """Decode *buffer* into ``{sheet_name: cell_matrix}`` in workbook order.

    Raises
    ------
    DecodeError
        If the file type is unsupported or the content cannot be read.
    """
    suffix = suffix.lower()
    if suffix == ".csv":
        return _read_csv(buffer, delimiter)

    if suffix in EXCEL_SUFFIXES:
        engine = "openpyxl"
    elif suffix == ".xls":
        engine = "xlrd"
    else:
        raise DecodeError(f"Unsupported file type: {suffix!r}. Use .csv, .xlsx, or .xls")

    try:
        return _read_excel(buffer, engine)
    except ImportError as exc:
        raise DecodeError(
            "Unsupported .xls input unless 'xlrd' is installed. "
            "Either convert to .xlsx or add dependency: pip install xlrd"
        ) from exc
    except Exception as exc:
        raise DecodeError(f"Could not read workbook ({type(exc).__name__}: {exc})") from exc


def load_workbook(path: Path, delimiter: str = ",") -> RawWorkbook:
    """Read the workbook at *path*; see :func:`decode_workbook`.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    DecodeError
        If *path* is not a regular file or cannot be decoded.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if not path.is_file():
        raise DecodeError(f"Input path is not a file: {path}")
    try:
        buffer = path.read_bytes()
    except OSError as exc:
        raise DecodeError(f"Error reading file: {exc}") from exc
    return decode_workbook(buffer, path.suffix, delimiter)


# ── Writing ──────────────────────────────────────────────────────


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    item = getattr(obj, "item", None)
    if callable(item):
        converted = item()
        if isinstance(converted, (str, int, float, bool)) or converted is None:
            return converted
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic + deterministic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
        default=_json_default,
    ) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
