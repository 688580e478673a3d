"""Numeric column-type inference over a bounded row sample."""

from __future__ import annotations

from collections.abc import Sequence

from tradelens import INFERENCE_SAMPLE_ROWS
from tradelens.models import Cell
from tradelens.numeric import is_numeric_cell
from tradelens.sheets import cell_at


def infer_summable_columns(
    rows: Sequence[Sequence[Cell]],
    header_length: int,
    sample_rows: int = INFERENCE_SAMPLE_ROWS,
) -> frozenset[int]:
    """Return the column indices whose sampled cells are all numeric or empty.

    Only the first *sample_rows* rows are inspected, so text appearing after
    the sample does not demote a column. No rows means no summable columns.
    """
    if not rows:
        return frozenset()

    summable = [True] * header_length
    for row in rows[:sample_rows]:
        for index in range(header_length):
            if not summable[index]:
                continue
            cell = cell_at(row, index)
            if cell is None or cell == "":
                continue
            if not is_numeric_cell(cell):
                summable[index] = False
    return frozenset(index for index, ok in enumerate(summable) if ok)
