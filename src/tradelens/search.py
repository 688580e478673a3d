"""Case-insensitive full-text search across every sheet."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from tradelens.models import Cell, SheetView


def cell_text(cell: Cell) -> str:
    """Render *cell* the way a spreadsheet shows it (``1.0`` -> ``"1"``)."""
    if cell is None:
        return ""
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell)


def row_matches(row: Sequence[Cell], needle: str) -> bool:
    """Return True if any non-empty cell contains the lower-cased *needle*."""
    return any(cell is not None and needle in cell_text(cell).lower() for cell in row)


def filter_views(views: Mapping[str, SheetView], term: str) -> Mapping[str, SheetView]:
    """Keep, per sheet, the data rows containing *term*; headers stay verbatim.

    An empty *term* returns *views* itself. Input views are never mutated.
    """
    if not term:
        return views
    needle = term.lower()
    return {
        name: SheetView(
            headers=list(view.headers),
            rows=[row for row in view.rows if row_matches(row, needle)],
        )
        for name, view in views.items()
    }


def match_counts(views: Mapping[str, SheetView]) -> dict[str, int]:
    """Return the number of data rows per sheet."""
    return {name: len(view.rows) for name, view in views.items()}
