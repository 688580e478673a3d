"""Transaction table helpers: filter, sort, paginate and total extracted records."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Literal

from tradelens import PAGE_SIZE
from tradelens.models import RECORD_FIELDS, TransactionRecord
from tradelens.search import cell_text

SortOrder = Literal["asc", "desc"]


@dataclass(frozen=True)
class Page:
    items: list[TransactionRecord]
    page: int
    total_pages: int


def filter_records(records: Sequence[TransactionRecord], term: str) -> list[TransactionRecord]:
    """Keep records where any populated field contains *term* (case-insensitive)."""
    if not term:
        return list(records)
    needle = term.lower()
    return [
        record
        for record in records
        if any(
            value is not None and needle in cell_text(value).lower()
            for value in record.to_dict().values()
        )
    ]


def _sort_key(value: Any) -> tuple[int, int, Any]:
    # None first, then numbers, then text; mixed types never compare directly.
    if value is None:
        return (0, 0, 0)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (1, 0, value)
    return (1, 1, str(value))


def sort_records(
    records: Sequence[TransactionRecord], key: str | None, order: SortOrder = "asc"
) -> list[TransactionRecord]:
    """Stable sort by a record field; ``key=None`` keeps source order."""
    if key is None:
        return list(records)
    if key not in RECORD_FIELDS:
        raise ValueError(f"Unknown sort key: {key!r}. Use one of {', '.join(RECORD_FIELDS)}")
    return sorted(
        records,
        key=lambda record: _sort_key(getattr(record, key)),
        reverse=(order == "desc"),
    )


def next_sort(current_key: str | None, current_order: SortOrder, key: str) -> tuple[str, SortOrder]:
    """Clicking the active key flips the order; a new key starts ascending."""
    if current_key == key:
        return key, "desc" if current_order == "asc" else "asc"
    return key, "asc"


def paginate(
    records: Sequence[TransactionRecord], page: int = 1, per_page: int = PAGE_SIZE
) -> Page:
    """Return 1-based *page* of *records*, clamped to the available range."""
    if per_page < 1:
        raise ValueError("per_page must be >= 1")
    total_pages = math.ceil(len(records) / per_page)
    page = max(1, min(page, max(total_pages, 1)))
    start = (page - 1) * per_page
    return Page(items=list(records[start:start + per_page]), page=page, total_pages=total_pages)


def totals(records: Sequence[TransactionRecord]) -> dict[str, float]:
    """Sum ``num_securities`` and ``value`` across *records*."""
    return {
        "num_securities": float(sum(r.num_securities for r in records)),
        "value": float(sum(r.value for r in records)),
    }
