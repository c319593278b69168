"""Column visibility, width, format and order overrides.

The override map is never mutated in place: every update function takes
the current map and returns a new one. ``ColumnVisibility`` owns the map
of one grid and performs the replace step.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any

from .log import debug
from .models import ColumnDefinition, ColumnOverride, ColumnOverrides


if TYPE_CHECKING:
    from .selection import SelectionReconciler


# --- Functional override updates ---


def update_column_override(
    overrides: ColumnOverrides, column_id: str, **changes: Any
) -> dict[str, ColumnOverride]:
    """Merge ``changes`` into the override of one column.

    Fields not named in ``changes`` (or passed as None) keep their value.

    Parameters
    ----------
    overrides : mapping of str to ColumnOverride
        The current override map. Not modified.
    column_id : str
        The column to update.
    **changes : Any
        ``hidden``, ``width`` and/or ``format``.

    Returns
    -------
    dict[str, ColumnOverride]
        A new override map.
    """
    updated = dict(overrides)
    updated[column_id] = updated.get(column_id, ColumnOverride()).merged(**changes)
    return updated


def hide_column_override(overrides: ColumnOverrides, column_id: str) -> dict[str, ColumnOverride]:
    """Return a new map with ``column_id`` marked hidden."""
    return update_column_override(overrides, column_id, hidden=True)


def show_column_override(overrides: ColumnOverrides, column_id: str) -> dict[str, ColumnOverride]:
    """Return a new map with ``column_id`` marked visible."""
    return update_column_override(overrides, column_id, hidden=False)


def change_column_format(
    overrides: ColumnOverrides, column_id: str, column_format: str
) -> dict[str, ColumnOverride]:
    """Return a new map with the display format of ``column_id`` replaced."""
    return update_column_override(overrides, column_id, format=column_format)


# --- Effective visibility ---


def is_hidden_via_column_order(column: ColumnDefinition, column_order: Sequence[str]) -> bool:
    """True if an explicit column order leaves ``column`` out.

    Index columns are never hidden by the column order.
    """
    if not column_order or column.is_index:
        return False
    return column.id not in column_order and column.name not in column_order


def is_column_hidden(
    column: ColumnDefinition,
    overrides: ColumnOverrides,
    column_order: Sequence[str] = (),
) -> bool:
    """Resolve whether a column is effectively hidden.

    An explicit ``hidden`` override decides over the definition's own
    ``is_hidden`` flag. A column left out of a non-empty column order is
    hidden either way.
    """
    override = overrides.get(column.id)
    if override is not None and override.hidden is not None:
        hidden = override.hidden
    else:
        hidden = column.is_hidden
    return hidden or is_hidden_via_column_order(column, column_order)


def visible_columns(
    columns: Iterable[ColumnDefinition],
    overrides: ColumnOverrides,
    column_order: Sequence[str] = (),
) -> list[ColumnDefinition]:
    """Visible columns in display order.

    Index columns come first. The remaining columns follow the column
    order when one is set, else their definition order.
    """
    shown = [c for c in columns if not is_column_hidden(c, overrides, column_order)]
    index_columns = [c for c in shown if c.is_index]
    data_columns = [c for c in shown if not c.is_index]
    if column_order:

        def position(column: ColumnDefinition) -> int:
            for key in (column.id, column.name):
                if key in column_order:
                    return column_order.index(key)
            return len(column_order)

        data_columns.sort(key=position)
    return index_columns + data_columns


class ColumnVisibility:
    """Override map and column order of one grid.

    Showing, hiding or reordering columns clears the column selection
    (keeping the row selection) so no selected position points at a
    different column afterwards.

    Parameters
    ----------
    reconciler : SelectionReconciler
        The selection of the same grid.
    columns : sequence of ColumnDefinition, optional
        Column definitions, used to restore columns hidden by the order.
    overrides : mapping of str to ColumnOverride, optional
        Initial overrides.
    column_order : sequence of str, optional
        Initial column order; empty means no explicit order.
    on_columns_change : callable, optional
        Called without arguments whenever the set or order of visible
        columns may have changed, before the selection is cleared.
    """

    def __init__(
        self,
        reconciler: SelectionReconciler,
        columns: Sequence[ColumnDefinition] = (),
        overrides: ColumnOverrides | None = None,
        column_order: Sequence[str] = (),
        on_columns_change: Callable[[], None] | None = None,
    ) -> None:
        self._reconciler = reconciler
        self._columns = {c.id: c for c in columns}
        self.overrides: dict[str, ColumnOverride] = dict(overrides or {})
        self.column_order: tuple[str, ...] = tuple(column_order)
        self._on_columns_change = on_columns_change

    def _columns_changed(self) -> None:
        if self._on_columns_change is not None:
            self._on_columns_change()
        self._reconciler.clear_selection(keep_rows=True, keep_columns=False)

    def hide_column(self, column_id: str) -> None:
        """Hide a column and clear the column selection."""
        self.overrides = hide_column_override(self.overrides, column_id)
        debug(f"Hid column '{column_id}'")
        self._columns_changed()

    def show_column(self, column_id: str) -> None:
        """Show a column and clear the column selection.

        A column left out of the column order is appended to it.
        """
        self.overrides = show_column_override(self.overrides, column_id)
        column = self._columns.get(column_id)
        if column is not None and is_hidden_via_column_order(column, self.column_order):
            self.column_order = (*self.column_order, column_id)
        debug(f"Showed column '{column_id}'")
        self._columns_changed()

    def change_column_format(self, column_id: str, column_format: str) -> None:
        """Change the display format of a column."""
        self.overrides = change_column_format(self.overrides, column_id, column_format)

    def set_column_width(self, column_id: str, width: int) -> None:
        """Change the width of a column."""
        self.overrides = update_column_override(self.overrides, column_id, width=width)

    def set_column_order(self, column_order: Sequence[str]) -> None:
        """Replace the column order and clear the column selection.

        An empty order removes the explicit order.
        """
        self.column_order = tuple(column_order)
        debug(f"Column order set to {self.column_order}")
        self._columns_changed()

    def is_hidden(self, column: ColumnDefinition) -> bool:
        """Effective hidden state of ``column``."""
        return is_column_hidden(column, self.overrides, self.column_order)

    def visible_columns(self, columns: Iterable[ColumnDefinition] | None = None) -> list[ColumnDefinition]:
        """Visible columns in display order."""
        return visible_columns(
            self._columns.values() if columns is None else columns,
            self.overrides,
            self.column_order,
        )
