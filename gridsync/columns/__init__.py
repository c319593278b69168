"""Column kind implementations.

``create_column`` is the single dispatch point from a ``ColumnKind`` to
its implementation; adding a kind means adding a ``ColumnKind`` member
and a ``case`` here.
"""

from __future__ import annotations

from ..exceptions import UnknownColumnKindError
from ..models import ColumnDefinition, ColumnKind
from .base import (
    BaseColumn,
    get_error_cell,
    get_link_display_value_from_regex,
    is_material_icon,
    parse_icon_pack_entry,
    to_safe_string,
)
from .link import LinkColumn, LinkColumnConfig


def create_column(definition: ColumnDefinition) -> BaseColumn:
    """Build the kind implementation for a column definition.

    Parameters
    ----------
    definition : ColumnDefinition
        The column to build.

    Returns
    -------
    BaseColumn
        The kind implementation, with its options compiled.

    Raises
    ------
    UnknownColumnKindError
        If ``definition.kind`` has no implementation.
    """
    match definition.kind:
        case ColumnKind.LINK:
            return LinkColumn(definition)
        case _:
            raise UnknownColumnKindError(
                f"No column implementation for kind {definition.kind!r}",
                kind=str(definition.kind),
            )


__all__ = [
    "BaseColumn",
    "LinkColumn",
    "LinkColumnConfig",
    "create_column",
    "get_error_cell",
    "get_link_display_value_from_regex",
    "is_material_icon",
    "parse_icon_pack_entry",
    "to_safe_string",
]
