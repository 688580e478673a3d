"""Raw sheet normalisation — split each cell matrix into headers + data rows."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from tradelens.models import Cell, SheetView


def cell_at(row: Sequence[Cell], index: int) -> Cell:
    """Return the cell at *index*, or ``None`` when the row is shorter."""
    if 0 <= index < len(row):
        return row[index]
    return None


def normalize_sheet(matrix: Sequence[Sequence[Cell]]) -> SheetView:
    """Return ``SheetView(headers=matrix[0], rows=matrix[1:])``.

    An empty matrix yields an empty view. Rows are copied, never aliased.
    """
    if not matrix:
        return SheetView(headers=[], rows=[])
    headers = list(matrix[0]) if matrix[0] is not None else []
    rows = [list(row) if row is not None else [] for row in matrix[1:]]
    return SheetView(headers=headers, rows=rows)


def normalize_workbook(raw: Mapping[str, Sequence[Sequence[Cell]]]) -> dict[str, SheetView]:
    """Normalise every sheet independently, keeping workbook order."""
    return {name: normalize_sheet(matrix) for name, matrix in raw.items()}
