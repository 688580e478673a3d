"""Per-symbol value summary and the boundary to an external summarizer."""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import pandas as pd

from tradelens.errors import SummaryError
from tradelens.models import SummaryEntry, TransactionRecord

if TYPE_CHECKING:
    from tradelens.extract import IngestResult

INSIGHT_TOP_N = 10
CHART_TOP_N = 15
NO_DATA_TEXT = "No data available to analyze."


@dataclass(frozen=True)
class Insight:
    """Summarizer output: markdown text plus the symbols it highlights."""

    text: str
    top_symbols: list[str] = field(default_factory=list)


class Summarizer(Protocol):
    def __call__(self, entries: list[SummaryEntry]) -> Awaitable[Insight]: ...


# ── Summary entries ─────────────────────────────────────────────


def build_summary(records: Sequence[TransactionRecord]) -> list[SummaryEntry]:
    """Total ``value`` per symbol, highest first.

    Symbols are grouped in encounter order and ties keep that order.
    """
    if not records:
        return []
    df = pd.DataFrame(
        {
            "symbol": pd.Series([r.symbol for r in records], dtype=object),
            "value": pd.Series([r.value for r in records], dtype="float64"),
        }
    )
    totals = (
        df.groupby("symbol", sort=False)["value"]
        .sum()
        .sort_values(ascending=False, kind="stable")
    )
    return [SummaryEntry(symbol=symbol, total_value=float(total)) for symbol, total in totals.items()]


def top_entries(entries: Sequence[SummaryEntry], n: int) -> list[SummaryEntry]:
    """Return the first *n* entries (already sorted by value)."""
    if n < 0:
        raise ValueError("n must be >= 0")
    return list(entries[:n])


# ── Summarizer boundary ─────────────────────────────────────────


async def fetch_insight(entries: Sequence[SummaryEntry], summarizer: Summarizer) -> Insight:
    """Ask *summarizer* for an insight over *entries*.

    Raises
    ------
    SummaryError
        If the summarizer fails for any reason.
    """
    if not entries:
        return Insight(text=NO_DATA_TEXT, top_symbols=[])
    try:
        return await summarizer(list(entries))
    except Exception as exc:
        raise SummaryError(f"Failed to generate insights: {exc}") from exc


async def summarize_result(
    result: IngestResult,
    summarizer: Summarizer,
    *,
    top_n: int = INSIGHT_TOP_N,
) -> tuple[Insight | None, list[str]]:
    """Return ``(insight, warnings)`` for an ingestion result.

    A summarizer failure becomes a warning; *result* is left untouched.
    """
    if not result.records:
        return None, []
    entries = top_entries(build_summary(result.records), top_n)
    try:
        insight = await fetch_insight(entries, summarizer)
    except SummaryError as exc:
        return None, [f"Could not fetch AI insights: {exc}"]
    return insight, []
