"""Tests for selection reconciliation.

Tests:
- SelectionModes derivation from declared capabilities
- Sync decisions for plain row/column/cell changes
- Cell clicks that clear rows/columns in the rendering surface
- Row selection keeping columns, column selection keeping rows and cell
- Index columns never being selected
- clear_selection() keep flags and sync decisions
"""

from __future__ import annotations

import pytest

from gridsync.models import CellPosition, GridSelection, SelectionMode
from gridsync.selection import SelectionModes, SelectionReconciler


def _modes(*modes: str) -> SelectionModes:
    return SelectionModes.from_capabilities(modes)


def _cell(row: int, column_id: str) -> CellPosition:
    return CellPosition(row=row, column_id=column_id)


@pytest.fixture
def make_reconciler(grid_columns, on_sync):
    """Factory for reconcilers over ``grid_columns`` that record syncs."""

    def _make(*modes: str, start: GridSelection | None = None) -> SelectionReconciler:
        reconciler = SelectionReconciler(grid_columns, _modes(*modes), on_sync=on_sync)
        if start is not None:
            # Seed the committed selection without syncing
            reconciler._selection = start
        return reconciler

    return _make


# =============================================================================
# SelectionModes
# =============================================================================


class TestSelectionModes:
    """Tests for SelectionModes.from_capabilities()."""

    def test_no_modes(self):
        """No declared modes means nothing is selectable."""
        modes = SelectionModes.from_capabilities([])
        assert not modes.is_active

    def test_multi_row(self):
        """Multi-row implies row selection."""
        modes = _modes("multi-row")
        assert modes.row is True
        assert modes.multi_row is True
        assert modes.column is False
        assert modes.cell is False

    def test_single_modes(self):
        """Single modes activate their kind without the multi flag."""
        modes = SelectionModes.from_capabilities(
            [SelectionMode.SINGLE_ROW, SelectionMode.SINGLE_COLUMN, SelectionMode.SINGLE_CELL]
        )
        assert (modes.row, modes.column, modes.cell) == (True, True, True)
        assert (modes.multi_row, modes.multi_column, modes.multi_cell) == (False, False, False)

    @pytest.mark.parametrize(
        "flags", [{"is_empty_table": True}, {"is_disabled": True}]
    )
    def test_empty_or_disabled_table(self, flags):
        """Empty and disabled tables have no selection."""
        modes = SelectionModes.from_capabilities(["multi-row", "multi-cell"], **flags)
        assert not modes.is_active

    def test_unknown_mode_raises(self):
        """Undeclared mode names are rejected."""
        with pytest.raises(ValueError):
            SelectionModes.from_capabilities(["diagonal"])


# =============================================================================
# Plain changes
# =============================================================================


class TestPlainChanges:
    """Selection changes that need no reconciliation."""

    def test_initial_selection_is_empty(self, make_reconciler):
        """A new reconciler has nothing selected."""
        reconciler = make_reconciler("multi-row")
        assert reconciler.selection == GridSelection.empty()
        assert not reconciler.is_row_selected
        assert not reconciler.is_column_selected
        assert not reconciler.is_cell_selected

    def test_row_change_syncs_in_row_mode(self, make_reconciler, on_sync):
        """Selecting rows in row mode syncs."""
        reconciler = make_reconciler("multi-row")
        assert reconciler.process_selection_change(GridSelection(rows=[1, 3])) is True
        assert reconciler.selection.rows == (1, 3)
        assert on_sync.calls == [(GridSelection(rows=[1, 3]), False)]

    def test_row_change_without_row_mode_commits_without_sync(self, make_reconciler, on_sync):
        """The committed selection always follows the candidate, even without sync."""
        reconciler = make_reconciler("single-column")
        assert reconciler.process_selection_change(GridSelection(rows=[2])) is False
        assert reconciler.selection.rows == (2,)
        assert on_sync.calls == []

    def test_unchanged_candidate_does_not_sync(self, make_reconciler, on_sync):
        """Repeating the committed selection is a no-op for the widget state."""
        reconciler = make_reconciler("multi-row", start=GridSelection(rows=[1]))
        assert reconciler.process_selection_change(GridSelection(rows=[1])) is False
        assert on_sync.calls == []

    def test_cell_mode_reports_sync_cells(self, make_reconciler, on_sync):
        """The sync callback is told whether cell selections are active."""
        reconciler = make_reconciler("single-cell")
        reconciler.process_selection_change(GridSelection(current=_cell(0, "colA")))
        assert on_sync.calls[-1][1] is True

    def test_syncs_are_delivered_in_order(self, make_reconciler, on_sync):
        """Every synced event reaches the callback, in event order."""
        reconciler = make_reconciler("multi-row")
        for rows in ([1], [1, 2], [2]):
            reconciler.process_selection_change(GridSelection(rows=rows))
        assert [sel.rows for sel, _ in on_sync.calls] == [(1,), (1, 2), (2,)]


# =============================================================================
# Cell click clearing rows/columns
# =============================================================================


class TestCellOverridesSpuriousClear:
    """A cell click must not clear the row/column selection."""

    def test_row_mode_keeps_rows_without_sync(self, make_reconciler, on_sync):
        """In row mode only, navigating to a cell keeps rows and does not sync."""
        reconciler = make_reconciler("multi-row", start=GridSelection(rows=[2, 5]))
        synced = reconciler.process_selection_change(GridSelection(current=_cell(3, "c")))
        assert synced is False
        assert reconciler.selection == GridSelection(rows=[2, 5], current=_cell(3, "c"))
        assert on_sync.calls == []

    def test_row_and_cell_mode_keeps_rows_and_syncs(self, make_reconciler, on_sync):
        """With cell mode active the cell change is synced, rows kept."""
        reconciler = make_reconciler(
            "multi-row", "single-cell", start=GridSelection(rows=[2, 5])
        )
        synced = reconciler.process_selection_change(GridSelection(current=_cell(3, "c")))
        assert synced is True
        expected = GridSelection(rows=[2, 5], current=_cell(3, "c"))
        assert reconciler.selection == expected
        assert on_sync.calls == [(expected, True)]

    def test_column_mode_keeps_columns(self, make_reconciler):
        """Column selections survive a cell click too."""
        reconciler = make_reconciler("multi-column", start=GridSelection(columns=[1, 2]))
        assert reconciler.process_selection_change(GridSelection(current=_cell(0, "colA"))) is False
        assert reconciler.selection.columns == (1, 2)
        assert reconciler.selection.current == _cell(0, "colA")

    def test_not_applied_without_row_or_column_mode(self, make_reconciler):
        """Pure cell mode takes the candidate as-is."""
        reconciler = make_reconciler("single-cell", start=GridSelection(rows=[2]))
        reconciler.process_selection_change(GridSelection(current=_cell(1, "colA")))
        assert reconciler.selection.rows == ()

    def test_not_applied_when_cell_unchanged(self, make_reconciler):
        """Clearing rows while keeping the same cell is a real clear."""
        start = GridSelection(rows=[2], current=_cell(1, "colA"))
        reconciler = make_reconciler("multi-row", start=start)
        assert reconciler.process_selection_change(GridSelection(current=_cell(1, "colA"))) is True
        assert reconciler.selection.rows == ()


# =============================================================================
# Row selection keeps columns / column selection keeps rows
# =============================================================================


class TestRowSelectKeepsColumns:
    """Selecting rows keeps the column selection."""

    def test_rows_replace_cleared_columns(self, make_reconciler, on_sync):
        """Candidate rows with cleared columns restore the committed columns."""
        reconciler = make_reconciler(
            "multi-row", "multi-column", start=GridSelection(columns=[1, 2])
        )
        assert reconciler.process_selection_change(GridSelection(rows=[4])) is True
        assert reconciler.selection == GridSelection(rows=[4], columns=[1, 2])
        assert on_sync.calls == [(GridSelection(rows=[4], columns=[1, 2]), False)]

    def test_forces_sync_without_row_mode(self, make_reconciler, on_sync):
        """The combined change is always synced."""
        reconciler = make_reconciler("multi-column", start=GridSelection(columns=[1]))
        assert reconciler.process_selection_change(GridSelection(rows=[0])) is True
        assert len(on_sync.calls) == 1


class TestColumnSelectKeepsRowsAndCell:
    """Selecting columns keeps the row and cell selection."""

    def test_columns_restore_rows_and_cell(self, make_reconciler, on_sync):
        """Candidate columns with cleared rows restore committed rows and cell."""
        start = GridSelection(rows=[1, 2], current=_cell(1, "colA"))
        reconciler = make_reconciler("multi-row", "multi-column", "single-cell", start=start)
        assert reconciler.process_selection_change(GridSelection(columns=[3])) is True
        assert reconciler.selection == GridSelection(
            rows=[1, 2], columns=[3], current=_cell(1, "colA")
        )
        assert on_sync.calls[-1] == (reconciler.selection, True)


# =============================================================================
# Index columns
# =============================================================================


class TestIndexColumnFilter:
    """Index columns are never part of the committed column selection."""

    def test_index_column_removed(self, make_reconciler):
        """Position 0 is the index column and is dropped."""
        reconciler = make_reconciler("multi-column")
        reconciler.process_selection_change(GridSelection(columns=[0, 2]))
        assert reconciler.selection.columns == (2,)

    def test_only_index_column_selected(self, make_reconciler, on_sync):
        """Selecting only the index column commits no columns."""
        reconciler = make_reconciler("multi-column")
        reconciler.process_selection_change(GridSelection(columns=[0]))
        assert reconciler.selection.columns == ()
        assert 0 not in on_sync.calls[-1][0].columns

    def test_index_column_removed_with_restored_rows(self, make_reconciler):
        """The filter also applies after rows were restored."""
        reconciler = make_reconciler(
            "multi-row", "multi-column", start=GridSelection(rows=[3])
        )
        reconciler.process_selection_change(GridSelection(columns=[0, 1]))
        assert reconciler.selection == GridSelection(rows=[3], columns=[1])

    def test_update_columns(self, make_reconciler, make_column):
        """A new render pass changes which positions are index columns."""
        reconciler = make_reconciler("multi-column")
        reconciler.update_columns([make_column("a"), make_column("idx", is_index=True)])
        reconciler.process_selection_change(GridSelection(columns=[0, 1]))
        assert reconciler.selection.columns == (0,)


# =============================================================================
# clear_selection
# =============================================================================


class TestClearSelection:
    """Tests for clear_selection()."""

    def test_clear_all(self, make_reconciler, on_sync):
        """Clearing everything syncs in row mode."""
        start = GridSelection(rows=[1], columns=[2], current=_cell(1, "colA"))
        reconciler = make_reconciler("multi-row", start=start)
        assert reconciler.clear_selection() is True
        assert reconciler.selection == GridSelection.empty()
        assert on_sync.calls == [(GridSelection.empty(), False)]

    def test_keep_rows(self, make_reconciler):
        """Rows survive; the focused cell never does."""
        start = GridSelection(rows=[1], columns=[2], current=_cell(1, "colA"))
        reconciler = make_reconciler("multi-row", "multi-column", start=start)
        assert reconciler.clear_selection(keep_rows=True) is True
        assert reconciler.selection == GridSelection(rows=[1])

    def test_keep_rows_in_row_mode_only_does_not_sync(self, make_reconciler, on_sync):
        """Keeping rows with only row mode active leaves nothing to sync."""
        reconciler = make_reconciler("multi-row", start=GridSelection(rows=[1], columns=[2]))
        assert reconciler.clear_selection(keep_rows=True) is False
        assert reconciler.selection == GridSelection(rows=[1])
        assert on_sync.calls == []

    def test_cell_mode_always_syncs(self, make_reconciler, on_sync):
        """With cell mode active every clear is synced."""
        reconciler = make_reconciler("single-cell", start=GridSelection(current=_cell(0, "colA")))
        assert reconciler.clear_selection(keep_rows=True, keep_columns=True) is True
        assert on_sync.calls == [(GridSelection.empty(), True)]

    def test_no_modes_never_syncs(self, make_reconciler, on_sync):
        """Without active modes the clear stays local."""
        reconciler = make_reconciler(start=GridSelection(rows=[1]))
        assert reconciler.clear_selection() is False
        assert reconciler.selection == GridSelection.empty()
        assert on_sync.calls == []
