"""Selection reconciliation for interactive grids.

The rendering surface reports a candidate selection on every interaction.
It conflates navigating to a cell with clearing the row and column
selection, so candidates are reconciled against the committed selection
before they are committed and, when the user's intent changed, synced to
the widget state.

Usage:
    modes = SelectionModes.from_capabilities(["multi-row", "single-cell"])
    reconciler = SelectionReconciler(columns, modes, on_sync=bridge.sync_selection)
    reconciler.process_selection_change(GridSelection(rows=[2, 5]))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from pydantic import BaseModel, ConfigDict

from .log import debug
from .models import ColumnDefinition, GridSelection, SelectionMode


SyncCallback = Callable[[GridSelection, bool], None]


class SelectionModes(BaseModel):
    """Active selection capabilities of one grid session.

    Derived once from the declared modes and never recomputed.
    """

    model_config = ConfigDict(frozen=True)

    row: bool = False
    multi_row: bool = False
    column: bool = False
    multi_column: bool = False
    cell: bool = False
    multi_cell: bool = False

    @classmethod
    def from_capabilities(
        cls,
        modes: Iterable[SelectionMode | str],
        is_empty_table: bool = False,
        is_disabled: bool = False,
    ) -> SelectionModes:
        """Derive the active modes from a declared capability set.

        Parameters
        ----------
        modes : iterable of SelectionMode or str
            Declared selection modes, e.g. ``["multi-row", "single-cell"]``.
        is_empty_table : bool, optional
            Empty tables have no selection.
        is_disabled : bool, optional
            Disabled tables have no selection.
        """
        declared = {SelectionMode(m) for m in modes}
        if is_empty_table or is_disabled:
            return cls()

        row = bool(declared & {SelectionMode.SINGLE_ROW, SelectionMode.MULTI_ROW})
        column = bool(declared & {SelectionMode.SINGLE_COLUMN, SelectionMode.MULTI_COLUMN})
        cell = bool(declared & {SelectionMode.SINGLE_CELL, SelectionMode.MULTI_CELL})
        return cls(
            row=row,
            multi_row=SelectionMode.MULTI_ROW in declared,
            column=column,
            multi_column=SelectionMode.MULTI_COLUMN in declared,
            cell=cell,
            multi_cell=SelectionMode.MULTI_CELL in declared,
        )

    @property
    def is_active(self) -> bool:
        """True if any kind of selection is active."""
        return self.row or self.column or self.cell


class SelectionReconciler:
    """Owns the committed selection of one grid session.

    Parameters
    ----------
    columns : sequence of ColumnDefinition
        Columns in display position order; index columns are never
        selectable.
    modes : SelectionModes
        Active selection capabilities.
    on_sync : callable, optional
        Called with ``(selection, sync_cells)`` whenever a selection change
        must be forwarded to the widget state. Calls happen synchronously,
        in event order.
    """

    def __init__(
        self,
        columns: Sequence[ColumnDefinition],
        modes: SelectionModes,
        on_sync: SyncCallback | None = None,
    ) -> None:
        self._columns = tuple(columns)
        self.modes = modes
        self._on_sync = on_sync
        self._selection = GridSelection.empty()

    @property
    def selection(self) -> GridSelection:
        """The committed selection."""
        return self._selection

    @property
    def is_row_selected(self) -> bool:
        return len(self._selection.rows) > 0

    @property
    def is_column_selected(self) -> bool:
        return len(self._selection.columns) > 0

    @property
    def is_cell_selected(self) -> bool:
        return self._selection.current is not None

    def update_columns(self, columns: Sequence[ColumnDefinition]) -> None:
        """Replace the column list after a new render pass."""
        self._columns = tuple(columns)

    def _index_positions(self) -> set[int]:
        return {idx for idx, column in enumerate(self._columns) if column.is_index}

    def _commit(self, selection: GridSelection, sync: bool) -> None:
        self._selection = selection
        if sync and self._on_sync is not None:
            self._on_sync(selection, self.modes.cell)

    def process_selection_change(self, candidate: GridSelection) -> bool:
        """Reconcile a candidate selection reported by the rendering surface.

        The reconciled selection is always committed; it is forwarded to
        the widget state only if the user's intent changed.

        Parameters
        ----------
        candidate : GridSelection
            What the rendering surface currently displays.

        Returns
        -------
        bool
            True if the selection was synced to the widget state.
        """
        committed = self._selection
        modes = self.modes

        rows_changed = candidate.rows != committed.rows
        columns_changed = candidate.columns != committed.columns
        cell_changed = candidate.current != committed.current

        sync = (
            (modes.row and rows_changed)
            or (modes.column and columns_changed)
            or (modes.cell and cell_changed)
        )
        updated = candidate

        # A cell click clears rows and columns in the rendering surface;
        # keep them and only move the focused cell.
        if (
            (modes.row or modes.column)
            and candidate.current is not None
            and cell_changed
            and not candidate.rows
            and not candidate.columns
        ):
            updated = updated.with_rows(candidate.rows or committed.rows).with_columns(
                candidate.columns or committed.columns
            )
            # Plain navigation unless cell selection is active
            sync = modes.cell

        # Selecting rows keeps the column selection
        if rows_changed and candidate.rows and columns_changed and not candidate.columns:
            updated = updated.with_rows(candidate.rows).with_columns(committed.columns)
            sync = True

        # Selecting columns keeps the row and cell selection
        if columns_changed and candidate.columns and rows_changed and not candidate.rows:
            updated = (
                updated.with_columns(candidate.columns)
                .with_rows(committed.rows)
                .with_current(committed.current)
            )
            sync = True

        if updated.columns != committed.columns and updated.columns:
            cleaned = updated.without_columns(self._index_positions())
            if cleaned.columns != updated.columns:
                debug(f"Dropped index columns from selection: {updated.columns} -> {cleaned.columns}")
                updated = cleaned

        debug(f"Selection {committed!r} -> {updated!r} (sync={sync})")
        self._commit(updated, sync)
        return sync

    def clear_selection(self, keep_rows: bool = False, keep_columns: bool = False) -> bool:
        """Clear the selection; the focused cell is always cleared.

        Parameters
        ----------
        keep_rows : bool, optional
            Keep the row selection.
        keep_columns : bool, optional
            Keep the column selection.

        Returns
        -------
        bool
            True if the cleared selection was synced to the widget state.
        """
        committed = self._selection
        cleared = GridSelection(
            rows=committed.rows if keep_rows else (),
            columns=committed.columns if keep_columns else (),
            current=None,
        )
        sync = (
            (not keep_rows and self.modes.row)
            or (not keep_columns and self.modes.column)
            or self.modes.cell
        )
        self._commit(cleared, sync)
        return sync
