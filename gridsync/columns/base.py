"""Column kind abstraction and shared cell helpers."""

from __future__ import annotations

import json
import re

from abc import ABC, abstractmethod
from typing import Any, ClassVar
from urllib.parse import unquote

from ..models import Cell, CellKind, ColumnDefinition, ColumnKind


# ":material/open_in_new:" -> pack "material", icon "open_in_new"
_ICON_PACK_ENTRY = re.compile(r"^:(?P<pack>[a-z]+)/(?P<icon>[a-z0-9_]+):$")

SUPPORTED_ICON_PACKS = frozenset({"material"})


def to_safe_string(value: Any) -> str:
    """Convert any cell value to a string without raising.

    Parameters
    ----------
    value : Any
        The raw cell value.

    Returns
    -------
    str
        ``""`` for None, JSON for lists/dicts, ``str(value)`` otherwise.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, dict)):
        try:
            return json.dumps(value, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def get_error_cell(message: str, details: str = "") -> Cell:
    """Build a read-only error cell.

    Error cells are never accepted as a write.

    Parameters
    ----------
    message : str
        Short error shown in the cell.
    details : str, optional
        Longer explanation available in the cell overlay.
    """
    display = f"⚠️ {message}"
    return Cell(
        kind=CellKind.TEXT,
        readonly=True,
        allow_overlay=True,
        data=display + (f"\n\n{details}\n" if details else ""),
        display_data=display,
        copy_data=message,
        is_error=True,
    )


def is_material_icon(text: str) -> bool:
    """Return True if ``text`` is a material icon reference like ``:material/home:``."""
    match = _ICON_PACK_ENTRY.match(text)
    return match is not None and match.group("pack") in SUPPORTED_ICON_PACKS


def parse_icon_pack_entry(text: str) -> tuple[str, str]:
    """Split an icon reference into ``(pack, icon_name)``.

    Raises
    ------
    ValueError
        If ``text`` is not of the form ``:pack/icon_name:``.
    """
    match = _ICON_PACK_ENTRY.match(text)
    if match is None:
        raise ValueError(f"Not an icon pack entry: {text!r}")
    return match.group("pack"), match.group("icon")


def get_link_display_value_from_regex(display_text_regex: re.Pattern[str], href: str | None) -> str:
    """Extract the display text of a link from its href.

    Uses the first capture group if the pattern has one, else the whole
    match. Returns ``""`` when the pattern does not match.
    """
    if not href:
        return ""
    match = display_text_regex.search(href)
    if match is None:
        return ""
    extracted = match.group(1) if display_text_regex.groups else match.group(0)
    return unquote(extracted or "")


class BaseColumn(ABC):
    """Base class for column kind implementations.

    A column kind turns raw values into cells for one column, extracts raw
    values from edited cells, and validates user input. Kind-specific
    options are parsed and compiled once, in ``__init__``.
    """

    kind: ClassVar[ColumnKind]
    is_editable_type: ClassVar[bool] = False

    def __init__(self, definition: ColumnDefinition) -> None:
        self.definition = definition

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def is_editable(self) -> bool:
        """True if the column accepts user writes."""
        return self.definition.is_editable and self.is_editable_type and not self.definition.is_index

    @abstractmethod
    def get_cell(self, data: Any, validate: bool = False) -> Cell:
        """Build the cell for a raw value.

        Parameters
        ----------
        data : Any
            The raw value, None for missing values.
        validate : bool, optional
            Return an error cell if ``data`` fails ``validate_input``.
        """

    @abstractmethod
    def get_cell_value(self, cell: Cell) -> Any:
        """Extract the raw value stored in a cell, None for missing values."""

    @abstractmethod
    def validate_input(self, value: Any) -> bool:
        """Return True if ``value`` may be written to this column."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
