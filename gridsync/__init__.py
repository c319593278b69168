"""gridsync - column kinds and selection reconciliation for interactive grids.

This package turns raw cell values into validated, renderable cells per
column kind, reconciles selection events from a grid rendering surface into
a consistent row/column/cell selection, and forwards confirmed selections
and writes to the widget state.
"""

from .bridge import WidgetStateBridge
from .columns import BaseColumn, LinkColumn, LinkColumnConfig, create_column
from .config import (
    GridSyncSettings,
    LinkSettings,
    LogSettings,
    SelectionSettings,
    get_settings,
)
from .exceptions import ColumnNotFoundError, GridSyncException, UnknownColumnKindError
from .grid import DataGrid
from .models import (
    Cell,
    CellKind,
    CellPosition,
    CellRange,
    ColumnDefinition,
    ColumnKind,
    ColumnOverride,
    GridSelection,
    SelectionMode,
)
from .selection import SelectionModes, SelectionReconciler
from .visibility import (
    ColumnVisibility,
    is_column_hidden,
    is_hidden_via_column_order,
    update_column_override,
    visible_columns,
)


__version__ = "0.1.0"

__all__ = [
    "BaseColumn",
    "Cell",
    "CellKind",
    "CellPosition",
    "CellRange",
    "ColumnDefinition",
    "ColumnKind",
    "ColumnNotFoundError",
    "ColumnOverride",
    "ColumnVisibility",
    "DataGrid",
    "GridSelection",
    "GridSyncException",
    "GridSyncSettings",
    "LinkColumn",
    "LinkColumnConfig",
    "LinkSettings",
    "LogSettings",
    "SelectionMode",
    "SelectionModes",
    "SelectionReconciler",
    "SelectionSettings",
    "UnknownColumnKindError",
    "WidgetStateBridge",
    "__version__",
    "create_column",
    "get_settings",
    "is_column_hidden",
    "is_hidden_via_column_order",
    "update_column_override",
    "visible_columns",
]
