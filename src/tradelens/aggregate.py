"""Aggregates over selected columns of the filtered view."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass

from tradelens.models import NOT_APPLICABLE, Cell, ColumnStats, RatioResult
from tradelens.numeric import is_numeric_cell, to_number
from tradelens.sheets import cell_at


@dataclass(frozen=True)
class ColumnSelection:
    """Ordered set of selected column indices; order matters for the ratio."""

    indices: tuple[int, ...] = ()

    def __contains__(self, index: object) -> bool:
        return index in self.indices

    def __len__(self) -> int:
        return len(self.indices)

    def __iter__(self) -> Iterator[int]:
        return iter(self.indices)

    def toggle(self, index: int, summable: Iterable[int]) -> ColumnSelection:
        """Add *index* at the end, or remove it when already selected.

        Indices outside *summable* leave the selection unchanged.
        """
        if index not in set(summable):
            return self
        if index in self.indices:
            return ColumnSelection(tuple(i for i in self.indices if i != index))
        return ColumnSelection((*self.indices, index))


def column_stats(rows: Sequence[Sequence[Cell]], index: int) -> ColumnStats:
    """Sum, count and average the numeric cells of column *index*.

    Empty and non-numeric cells are skipped, not counted as zero.
    """
    total = 0.0
    count = 0
    for row in rows:
        cell = cell_at(row, index)
        if is_numeric_cell(cell):
            total += to_number(cell)
            count += 1
    average = total / count if count > 0 else 0.0
    return ColumnStats(sum=total, count=count, average=average)


def compute_aggregates(
    rows: Sequence[Sequence[Cell]], selection: Iterable[int]
) -> dict[int, ColumnStats]:
    """Return ``{index: ColumnStats}`` in selection order."""
    return {index: column_stats(rows, index) for index in selection}


def compute_ratio(
    aggregates: Mapping[int, ColumnStats], selection: Iterable[int]
) -> RatioResult | None:
    """Divide the first selected column's sum by the second's.

    Only defined for exactly two selected columns. A denominator sum of zero
    yields ``"N/A"``; the quotient is never rounded here.
    """
    indices = tuple(selection)
    if len(indices) != 2:
        return None
    numerator, denominator = indices
    num_sum = aggregates[numerator].sum
    den_sum = aggregates[denominator].sum
    result: float | str = NOT_APPLICABLE if den_sum == 0 else num_sum / den_sum
    return RatioResult(numerator=numerator, denominator=denominator, result=result)
