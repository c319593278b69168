"""Interactive grid session.

``DataGrid`` wires the pieces of one grid widget together:

- one column kind implementation per column (cells, validation)
- the selection reconciler
- the visibility and order overrides
- the widget state bridge for confirmed selections and writes

Usage:
    from gridsync import ColumnDefinition, DataGrid, GridSelection

    grid = DataGrid(
        [ColumnDefinition(id="url", name="url", is_editable=True)],
        selection_modes=["multi-row"],
        emit=lambda event, data: print(event, data),
    )
    grid.get_cell("url", "www.example.com")
    grid.process_selection_change(GridSelection(rows=[0]))
    grid.edit_cell("url", 0, "https://example.com")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .bridge import EmitFunc, WidgetStateBridge
from .columns import BaseColumn, create_column
from .config import get_settings
from .exceptions import ColumnNotFoundError
from .log import debug, info, warn
from .models import Cell, ColumnDefinition, ColumnOverrides, GridSelection, SelectionMode
from .selection import SelectionModes, SelectionReconciler
from .visibility import ColumnVisibility


def _discard_event(event_type: str, data: dict[str, Any]) -> None:
    debug(f"No widget state attached, dropping {event_type}: {data}")


class DataGrid:  # pylint: disable=too-many-instance-attributes
    """One interactive grid widget session.

    Parameters
    ----------
    columns : sequence of ColumnDefinition
        All column definitions; selection positions refer to the visible ones.
    selection_modes : iterable of SelectionMode or str, optional
        Declared selection capabilities. Defaults to
        ``SelectionSettings.default_modes``.
    emit : callable, optional
        ``emit(event_type, data)`` receiving confirmed selections and writes.
    column_overrides : mapping of str to ColumnOverride, optional
        Initial per-column overrides.
    column_order : sequence of str, optional
        Initial column order (ids or names); empty means no explicit order.
    original_index : sequence of int, optional
        Data-source row index for each displayed row.
    num_rows : int, optional
        Number of rows; a table with zero rows has no selection.
    disabled : bool, optional
        Disabled tables have no selection.
    grid_id : str, optional
        Identifier included in emitted payloads.
    initial_state : mapping or str, optional
        Persisted widget state (or its JSON string) whose selection the
        session starts from.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        columns: Sequence[ColumnDefinition],
        selection_modes: Iterable[SelectionMode | str] | None = None,
        emit: EmitFunc | None = None,
        column_overrides: ColumnOverrides | None = None,
        column_order: Sequence[str] = (),
        original_index: Sequence[int] | None = None,
        num_rows: int | None = None,
        disabled: bool = False,
        grid_id: str | None = None,
        initial_state: Mapping[str, Any] | str | None = None,
    ) -> None:
        self.columns: tuple[ColumnDefinition, ...] = tuple(columns)
        self._kinds: dict[str, BaseColumn] = {c.id: create_column(c) for c in self.columns}

        if selection_modes is None:
            selection_modes = get_settings().selection.default_modes
        self.selection_modes = SelectionModes.from_capabilities(
            selection_modes,
            is_empty_table=num_rows == 0,
            is_disabled=disabled,
        )

        self.bridge = WidgetStateBridge(
            emit or _discard_event,
            (),
            original_index=original_index,
            grid_id=grid_id,
        )
        self.reconciler = SelectionReconciler(
            (), self.selection_modes, on_sync=self.bridge.sync_selection
        )
        self.visibility = ColumnVisibility(
            self.reconciler,
            self.columns,
            overrides=column_overrides,
            column_order=column_order,
            on_columns_change=self._sync_visible_columns,
        )
        self._sync_visible_columns()
        debug(
            f"Created grid {grid_id or ''} with {len(self.columns)} columns, "
            f"selection active: {self.selection_modes.is_active}"
        )

        if initial_state is not None:
            restored = self.bridge.restore_selection(initial_state, self.selection_modes)
            if restored != GridSelection.empty():
                info(f"Restored selection of grid {grid_id or ''}: {restored!r}")
                self.reconciler.process_selection_change(restored)

    def _sync_visible_columns(self) -> None:
        """Point selection positions at the columns currently on screen."""
        visible = self.visibility.visible_columns(self.columns)
        self.reconciler.update_columns(visible)
        self.bridge.update_columns(visible)

    # --- Columns & cells ---

    def column(self, column_id: str) -> BaseColumn:
        """Kind implementation of a column.

        Raises
        ------
        ColumnNotFoundError
            If the grid has no column ``column_id``.
        """
        try:
            return self._kinds[column_id]
        except KeyError:
            raise ColumnNotFoundError(
                f"Grid has no column '{column_id}'", column_id=column_id
            ) from None

    def get_cell(self, column_id: str, value: Any, validate: bool = False) -> Cell:
        """Build the cell of ``value`` in column ``column_id``."""
        return self.column(column_id).get_cell(value, validate)

    def get_cell_value(self, column_id: str, cell: Cell) -> Any:
        """Extract the raw value of a cell of column ``column_id``."""
        return self.column(column_id).get_cell_value(cell)

    def validate_input(self, column_id: str, value: Any) -> bool:
        """Check ``value`` against the rules of column ``column_id``."""
        return self.column(column_id).validate_input(value)

    def edit_cell(self, column_id: str, row_index: int, raw_value: Any) -> bool:
        """Apply a user edit and forward it as a confirmed write.

        The edit is rejected if the column is not editable or the value
        produces an error cell.

        Parameters
        ----------
        column_id : str
            The edited column.
        row_index : int
            Displayed row position.
        raw_value : Any
            The entered value.

        Returns
        -------
        bool
            True if the write was forwarded.
        """
        column = self.column(column_id)
        if not column.is_editable:
            warn(f"Rejected edit of read-only column '{column_id}' (row {row_index})")
            return False

        cell = column.get_cell(raw_value, validate=True)
        # Missing-value cells skip validation; required columns still refuse them
        if cell.is_error or (cell.is_missing_value and not column.validate_input(None)):
            warn(f"Rejected invalid value for column '{column_id}' (row {row_index})")
            return False

        self.bridge.sync_write(column_id, row_index, column.get_cell_value(cell))
        return True

    # --- Selection ---

    @property
    def selection(self) -> GridSelection:
        """The committed selection."""
        return self.reconciler.selection

    def process_selection_change(self, candidate: GridSelection) -> bool:
        """Reconcile a candidate selection from the rendering surface."""
        return self.reconciler.process_selection_change(candidate)

    def clear_selection(self, keep_rows: bool = False, keep_columns: bool = False) -> bool:
        """Clear the selection, optionally keeping rows and/or columns."""
        return self.reconciler.clear_selection(keep_rows=keep_rows, keep_columns=keep_columns)

    # --- Visibility ---

    def hide_column(self, column_id: str) -> None:
        """Hide a column; clears the column selection."""
        self.column(column_id)
        self.visibility.hide_column(column_id)

    def show_column(self, column_id: str) -> None:
        """Show a column; clears the column selection."""
        self.column(column_id)
        self.visibility.show_column(column_id)

    def change_column_format(self, column_id: str, column_format: str) -> None:
        """Change the display format of a column."""
        self.column(column_id)
        self.visibility.change_column_format(column_id, column_format)

    def set_column_order(self, column_order: Sequence[str]) -> None:
        """Reorder the columns; clears the column selection."""
        self.visibility.set_column_order(column_order)

    def is_column_hidden(self, column_id: str) -> bool:
        """Effective hidden state of a column."""
        return self.visibility.is_hidden(self.column(column_id).definition)

    def visible_columns(self) -> list[ColumnDefinition]:
        """Visible columns in display order."""
        return self.visibility.visible_columns(self.columns)
