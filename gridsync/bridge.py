"""Widget state bridge: forwards confirmed selections and writes.

The bridge turns positional selections into the widget-state payload the
host persists, and sends it through an ``emit(event_type, data)``
callable. Transport and persistence are up to the host.

Positions always refer to the columns currently on screen: the visible
columns in display order, as passed to ``update_columns``.
"""

from __future__ import annotations

import json

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from .log import debug, warn
from .models import CellPosition, CellRange, ColumnDefinition, GridSelection
from .selection import SelectionModes


EmitFunc = Callable[[str, dict[str, Any]], None]

SELECTION_EVENT = "grid:selection-change"
CELL_EDIT_EVENT = "grid:cell-edit"


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


class WidgetStateBridge:
    """Sends confirmed selections and cell writes to the widget state.

    Parameters
    ----------
    emit : callable
        ``emit(event_type, data)``; called synchronously, in event order.
    columns : sequence of ColumnDefinition
        Visible columns in display position order.
    original_index : sequence of int, optional
        Maps displayed row positions to row indices of the data source
        (differs from identity when the grid is sorted).
    grid_id : str, optional
        Included in every payload as ``gridId``.
    """

    def __init__(
        self,
        emit: EmitFunc,
        columns: Sequence[ColumnDefinition],
        original_index: Sequence[int] | None = None,
        grid_id: str | None = None,
    ) -> None:
        self._emit = emit
        self._columns = tuple(columns)
        self._original_index = tuple(original_index) if original_index is not None else None
        self._display_rows = (
            {index: row for row, index in enumerate(self._original_index)}
            if self._original_index is not None
            else None
        )
        self.grid_id = grid_id
        self._last_selection_state: str | None = None

    def update_columns(self, columns: Sequence[ColumnDefinition]) -> None:
        """Replace the visible columns after they were hidden, shown or reordered."""
        self._columns = tuple(columns)

    def get_original_index(self, row: int) -> int:
        """Row index in the data source for a displayed row position."""
        if self._original_index is None or not 0 <= row < len(self._original_index):
            return row
        return self._original_index[row]

    def get_display_row(self, index: Any) -> int | None:
        """Displayed row position of a data-source row index, None if unknown."""
        if not isinstance(index, int) or isinstance(index, bool) or index < 0:
            return None
        if self._display_rows is None:
            return index
        return self._display_rows.get(index)

    def _column_at(self, position: int) -> ColumnDefinition | None:
        if 0 <= position < len(self._columns):
            return self._columns[position]
        return None

    def _position_of(self, column_id: str) -> int | None:
        for position, column in enumerate(self._columns):
            if column.id == column_id:
                return position
        return None

    def build_selection_state(self, selection: GridSelection, sync_cells: bool) -> dict[str, Any]:
        """Build the widget-state payload for a selection.

        Rows are reported as data-source indices and columns by name.
        Cells are only reported when ``sync_cells`` is set; index columns
        are never reported.
        """
        columns: list[str] = []
        for position in selection.columns:
            column = self._column_at(position)
            if column is not None:
                columns.append(column.display_name)

        cells: list[list[Any]] = []
        current = selection.current
        if sync_cells and current is not None:
            if current.range is not None:
                rng = current.range
                for row in range(rng.y, rng.y + rng.height):
                    for position in range(rng.x, rng.x + rng.width):
                        column = self._column_at(position)
                        if column is not None and not column.is_index:
                            cells.append([self.get_original_index(row), column.display_name])
            else:
                position = self._position_of(current.column_id)
                column = self._column_at(position) if position is not None else None
                if column is not None and not column.is_index:
                    cells.append([self.get_original_index(current.row), column.display_name])

        return {
            "selection": {
                "rows": [self.get_original_index(row) for row in selection.rows],
                "columns": columns,
                "cells": cells,
            }
        }

    def restore_selection(
        self, state: Mapping[str, Any] | str | None, modes: SelectionModes
    ) -> GridSelection:
        """Rebuild a selection from a persisted widget state.

        The inverse of ``build_selection_state``: data-source rows become
        displayed rows and column names become positions. Unknown rows,
        unknown columns and index columns are dropped. Single-row and
        single-column modes keep the first stored entry; the focused cell
        is only restored in single-cell mode.

        The restored state counts as already sent, so re-committing an
        unchanged selection does not emit.

        Parameters
        ----------
        state : mapping or str, optional
            The stored widget state, as a mapping or its JSON string.
        modes : SelectionModes
            Active selection capabilities of the grid.

        Returns
        -------
        GridSelection
            The restored selection; empty if nothing could be restored.
        """
        if not state or not modes.is_active:
            return GridSelection.empty()

        if isinstance(state, str):
            try:
                state = json.loads(state)
            except ValueError as e:
                warn(f"Ignoring unparsable selection state: {e}")
                return GridSelection.empty()

        stored = state.get("selection") if isinstance(state, Mapping) else None
        if not isinstance(stored, Mapping):
            warn(f"Ignoring selection state without a selection: {state!r}")
            return GridSelection.empty()

        positions = {
            column.display_name: position
            for position, column in enumerate(self._columns)
            if not column.is_index
        }

        rows: list[int] = []
        if modes.row:
            rows = [
                row
                for row in (self.get_display_row(r) for r in _as_list(stored.get("rows")))
                if row is not None
            ]
            if not modes.multi_row:
                rows = rows[:1]

        columns: list[int] = []
        if modes.column:
            columns = [
                positions[name]
                for name in _as_list(stored.get("columns"))
                if isinstance(name, str) and name in positions
            ]
            if not modes.multi_column:
                columns = columns[:1]

        current = None
        cells = _as_list(stored.get("cells"))
        if modes.cell and not modes.multi_cell and cells:
            first = _as_list(cells[0])
            if len(first) == 2:
                row = self.get_display_row(first[0])
                position = positions.get(first[1]) if isinstance(first[1], str) else None
                if row is not None and position is not None:
                    current = CellPosition(
                        row=row,
                        column_id=self._columns[position].id,
                        range=CellRange(x=position, y=row),
                    )

        self._last_selection_state = json.dumps(
            {"selection": dict(stored)}, sort_keys=True, default=str
        )
        return GridSelection(rows=rows, columns=columns, current=current)

    def sync_selection(self, selection: GridSelection, sync_cells: bool) -> bool:
        """Forward a confirmed selection.

        Nothing is sent if the resulting widget state equals the last one
        sent.

        Returns
        -------
        bool
            True if an event was emitted.
        """
        state = self.build_selection_state(selection, sync_cells)
        encoded = json.dumps(state, sort_keys=True)
        if encoded == self._last_selection_state:
            debug("Selection state unchanged, not syncing")
            return False
        self._last_selection_state = encoded

        payload: dict[str, Any] = dict(state)
        if self.grid_id:
            payload["gridId"] = self.grid_id
        self._emit(SELECTION_EVENT, payload)
        return True

    def sync_write(self, column_id: str, row_index: int, value: Any) -> None:
        """Forward a confirmed cell write.

        Parameters
        ----------
        column_id : str
            The edited column.
        row_index : int
            Displayed row position; reported as data-source index.
        value : Any
            The raw value extracted from the edited cell.
        """
        payload: dict[str, Any] = {
            "columnId": column_id,
            "rowIndex": self.get_original_index(row_index),
            "value": value,
        }
        if self.grid_id:
            payload["gridId"] = self.grid_id
        self._emit(CELL_EDIT_EVENT, payload)
