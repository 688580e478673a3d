from __future__ import annotations

import pytest

from tradelens.models import SheetView
from tradelens.viewer import ViewerState


def _views() -> dict[str, SheetView]:
    return {
        "Trades": SheetView(
            headers=["Symbol", "Qty", "Value"],
            rows=[["TCS", 10, "1,000"], ["INFY", 5, 500], ["TCS", "n/a", 250]],
        ),
        "Other": SheetView(headers=["A", "B"], rows=[[1, 2], [3, 4]]),
        "Blank": SheetView(headers=[], rows=[]),
    }


def test_open_starts_on_first_sheet_without_selection() -> None:
    state = ViewerState.open(_views())

    assert state.active_sheet == "Trades"
    assert state.search_term == ""
    assert len(state.selection) == 0


def test_snapshot_reports_summable_columns_and_aggregates() -> None:
    state = ViewerState.open(_views()).toggle_column(2)

    snap = state.snapshot()

    assert snap.summable == frozenset({2})
    assert snap.aggregates[2].sum == 1750.0
    assert snap.aggregates[2].count == 3
    assert snap.ratio is None


def test_toggle_non_summable_column_is_a_noop() -> None:
    state = ViewerState.open(_views())

    assert state.toggle_column(0).selection == state.selection
    assert state.toggle_column(1).selection == state.selection


def test_search_restricts_aggregates_to_filtered_rows() -> None:
    state = ViewerState.open(_views()).search("tcs")
    state = state.toggle_column(1).toggle_column(2)

    snap = state.snapshot()

    assert [row[0] for row in snap.active.rows] == ["TCS", "TCS"]
    # With "n/a" filtered in, Qty is not summable in the view.
    assert snap.summable == frozenset({2})
    assert list(snap.aggregates) == [2]
    assert snap.aggregates[2].sum == 1250.0
    assert snap.counts == {"Trades": 2, "Other": 0, "Blank": 0}


def test_switching_sheet_resets_selection() -> None:
    state = ViewerState.open(_views()).toggle_column(2)
    assert len(state.selection) == 1

    switched = state.select_sheet("Other")

    assert switched.active_sheet == "Other"
    assert len(switched.selection) == 0
    assert state.selection.indices == (2,)


def test_search_change_keeps_selection() -> None:
    state = ViewerState.open(_views()).select_sheet("Other").toggle_column(0)

    assert state.search("3").selection.indices == (0,)


def test_ratio_follows_selection_order() -> None:
    state = ViewerState.open(_views()).select_sheet("Other")

    a_then_b = state.toggle_column(0).toggle_column(1).snapshot().ratio
    b_then_a = state.toggle_column(1).toggle_column(0).snapshot().ratio

    assert a_then_b is not None and b_then_a is not None
    assert (a_then_b.numerator, a_then_b.denominator, a_then_b.result) == (0, 1, 4 / 6)
    assert (b_then_a.numerator, b_then_a.denominator, b_then_a.result) == (1, 0, 6 / 4)


def test_unknown_sheet_raises_key_error() -> None:
    with pytest.raises(KeyError, match="Missing"):
        ViewerState.open(_views()).select_sheet("Missing")


def test_empty_sheet_snapshot_has_no_aggregates() -> None:
    snap = ViewerState.open(_views()).select_sheet("Blank").snapshot()

    assert snap.active.rows == []
    assert snap.summable == frozenset()
    assert snap.aggregates == {}
    assert snap.ratio is None


def test_snapshot_recomputes_without_mutating_views() -> None:
    views = _views()
    state = ViewerState.open(views).search("infy")

    state.snapshot()

    assert len(views["Trades"].rows) == 3
    assert state.search("").snapshot().active.rows == views["Trades"].rows
