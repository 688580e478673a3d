"""Raw-sheet viewer state: active sheet, search term and column selection.

Every transition returns a new :class:`ViewerState`; derived data (filtered
rows, summable columns, aggregates, ratio) is recomputed from scratch by
:meth:`ViewerState.snapshot` and never stored on the state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from tradelens.aggregate import ColumnSelection, compute_aggregates, compute_ratio
from tradelens.inference import infer_summable_columns
from tradelens.models import ColumnStats, RatioResult, SheetView
from tradelens.search import filter_views, match_counts

_EMPTY_VIEW = SheetView(headers=[], rows=[])


@dataclass(frozen=True)
class ViewSnapshot:
    filtered: Mapping[str, SheetView]
    active: SheetView
    summable: frozenset[int]
    aggregates: dict[int, ColumnStats]
    ratio: RatioResult | None
    counts: dict[str, int]


@dataclass(frozen=True)
class ViewerState:
    views: Mapping[str, SheetView] = field(default_factory=dict)
    active_sheet: str = ""
    search_term: str = ""
    selection: ColumnSelection = field(default_factory=ColumnSelection)

    @classmethod
    def open(cls, views: Mapping[str, SheetView]) -> ViewerState:
        """Start on the first sheet with no search and no selection."""
        return cls(views=views, active_sheet=next(iter(views), ""))

    def select_sheet(self, name: str) -> ViewerState:
        """Switch sheets; the column selection is cleared in the same step."""
        if name not in self.views:
            raise KeyError(f"Unknown sheet: {name!r}")
        return replace(self, active_sheet=name, selection=ColumnSelection())

    def search(self, term: str) -> ViewerState:
        return replace(self, search_term=term)

    def toggle_column(self, index: int) -> ViewerState:
        """Select or deselect *index*; non-summable columns are ignored."""
        summable = self._summable(self._active(filter_views(self.views, self.search_term)))
        return replace(self, selection=self.selection.toggle(index, summable))

    def snapshot(self) -> ViewSnapshot:
        filtered = filter_views(self.views, self.search_term)
        active = self._active(filtered)
        summable = self._summable(active)
        aggregates: dict[int, ColumnStats] = {}
        ratio: RatioResult | None = None
        if active.rows and len(self.selection):
            aggregates = compute_aggregates(active.rows, self.selection)
            ratio = compute_ratio(aggregates, self.selection)
        return ViewSnapshot(
            filtered=filtered,
            active=active,
            summable=summable,
            aggregates=aggregates,
            ratio=ratio,
            counts=match_counts(filtered),
        )

    def _active(self, filtered: Mapping[str, SheetView]) -> SheetView:
        return filtered.get(self.active_sheet, _EMPTY_VIEW)

    @staticmethod
    def _summable(view: SheetView) -> frozenset[int]:
        return infer_summable_columns(view.rows, view.width)
