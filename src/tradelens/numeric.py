"""Numeric cell coercion tolerant of comma thousands separators."""

from __future__ import annotations

import math
import re

from tradelens.models import Cell

_LEADING_NUMBER_RE = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def _parse_finite(value: Cell) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None

    token = str(value).replace(",", "")
    # float() would also accept "1_000"
    if "_" in token:
        return None
    try:
        number = float(token)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _parse_leading(value: Cell) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _parse_finite(value)

    m = _LEADING_NUMBER_RE.match(str(value).replace(",", ""))
    if m is None:
        return None
    number = float(m.group(1))
    return number if math.isfinite(number) else None


def is_numeric_cell(value: Cell) -> bool:
    """Return True when *value* reads as a finite number once commas are removed.

    ``None`` and ``""`` are never numeric.
    """
    if value is None or value == "":
        return False
    return _parse_finite(value) is not None


def to_number(value: Cell) -> float:
    """Read the leading number of *value* after removing commas, else ``0.0``.

    Trailing text is ignored, so ``"1,000 INR"`` reads as ``1000.0``. This is
    looser than :func:`is_numeric_cell`, which rejects such cells.
    """
    number = _parse_leading(value)
    return 0.0 if number is None else number
