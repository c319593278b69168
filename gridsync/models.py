"""Pydantic models for gridsync.

Column definitions, cells and selections are immutable: every state
change produces a new instance instead of mutating an existing one.
"""

from __future__ import annotations

import webbrowser

from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator


ContentAlignment = Literal["left", "center", "right"]


class ColumnKind(str, Enum):
    """Column kinds with a cell implementation.

    Every member must be handled by ``gridsync.columns.create_column``.
    """

    LINK = "link"


class CellKind(str, Enum):
    """Renderer cell kinds."""

    URI = "uri"
    TEXT = "text"


class SelectionMode(str, Enum):
    """Selection capabilities a grid can declare."""

    SINGLE_ROW = "single-row"
    MULTI_ROW = "multi-row"
    SINGLE_COLUMN = "single-column"
    MULTI_COLUMN = "multi-column"
    SINGLE_CELL = "single-cell"
    MULTI_CELL = "multi-cell"


class ColumnDefinition(BaseModel):
    """Identity, kind and flags of one grid column.

    Created once per render pass from the data source and never mutated.
    ``is_hidden`` is the column's own configured flag; the effective
    visibility also depends on the overrides and the column order (see
    ``gridsync.visibility``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    title: str = ""
    kind: ColumnKind = ColumnKind.LINK
    is_index: bool = Field(default=False, alias="isIndex")
    is_pinned: bool = Field(default=False, alias="isPinned")
    is_editable: bool = Field(default=False, alias="isEditable")
    is_hidden: bool = Field(default=False, alias="isHidden")
    is_required: bool = Field(default=False, alias="isRequired")
    content_alignment: ContentAlignment | None = Field(default=None, alias="contentAlignment")
    column_type_options: dict[str, Any] = Field(default_factory=dict, alias="columnTypeOptions")

    @property
    def display_name(self) -> str:
        """Name used when reporting this column to the widget state."""
        return self.name or self.id


class CellRange(BaseModel):
    """Rectangular multi-cell range in column/row positions."""

    model_config = ConfigDict(frozen=True)

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(default=1, ge=1)
    height: int = Field(default=1, ge=1)


class CellPosition(BaseModel):
    """The focused cell of a selection."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    row: int
    column_id: str = Field(alias="columnId")
    range: CellRange | None = None


def _as_ordered_set(value: Any) -> tuple[int, ...]:
    if value is None:
        return ()
    if isinstance(value, int):
        return (value,)
    return tuple(sorted({int(v) for v in value}))


class GridSelection(BaseModel):
    """Composite row/column/cell selection of one grid.

    ``rows`` and ``columns`` are positional, sorted and free of duplicates.
    """

    model_config = ConfigDict(frozen=True)

    rows: tuple[int, ...] = ()
    columns: tuple[int, ...] = ()
    current: CellPosition | None = None

    @field_validator("rows", "columns", mode="before")
    @classmethod
    def normalize_positions(cls, v: Any) -> tuple[int, ...]:
        """Accept any iterable of positions and store it as an ordered set."""
        return _as_ordered_set(v)

    @classmethod
    def empty(cls) -> GridSelection:
        """Selection with nothing selected."""
        return cls()

    def with_rows(self, rows: Iterable[int]) -> GridSelection:
        """Copy with a replaced row set."""
        return self.model_copy(update={"rows": _as_ordered_set(rows)})

    def with_columns(self, columns: Iterable[int]) -> GridSelection:
        """Copy with a replaced column set."""
        return self.model_copy(update={"columns": _as_ordered_set(columns)})

    def with_current(self, current: CellPosition | None) -> GridSelection:
        """Copy with a replaced focused cell."""
        return self.model_copy(update={"current": current})

    def without_columns(self, positions: Iterable[int]) -> GridSelection:
        """Copy with the given column positions removed."""
        removed = set(positions)
        return self.with_columns(c for c in self.columns if c not in removed)


class ColumnOverride(BaseModel):
    """User overrides for a single column.

    ``None`` means "not overridden"; merging never erases set fields.
    """

    model_config = ConfigDict(frozen=True)

    hidden: bool | None = None
    width: int | None = Field(default=None, ge=0)
    format: str | None = None

    def merged(self, **changes: Any) -> ColumnOverride:
        """Return a copy with the non-None ``changes`` applied."""
        return self.model_copy(update={k: v for k, v in changes.items() if v is not None})


ColumnOverrides = Mapping[str, ColumnOverride]


class ClickEvent(Protocol):
    """UI event that triggered a cell click."""

    def prevent_default(self) -> None:
        """Suppress the default UI action of the event."""


UrlOpener = Callable[[str], Any]


def open_in_browser(url: str) -> None:
    """Open ``url`` in the system browser, honoring ``LinkSettings``."""
    from .config import get_settings

    if get_settings().link.open_new_tab:
        webbrowser.open_new_tab(url)
    else:
        webbrowser.open_new(url)


class Cell(BaseModel):
    """Renderable cell produced by a column kind.

    Error cells (``is_error``) are structurally valid but must never be
    committed as a write.
    """

    model_config = ConfigDict(frozen=True)

    kind: CellKind
    data: Any = None
    display_data: str = ""
    copy_data: str = ""
    is_missing_value: bool = False
    is_error: bool = False
    readonly: bool = True
    allow_overlay: bool = True
    content_align: ContentAlignment | None = None
    hover_effect: bool = False
    theme_override: dict[str, Any] | None = None
    href: str | None = None

    def click(self, event: ClickEvent | None = None, opener: UrlOpener | None = None) -> bool:
        """Navigate to the cell's link.

        Parameters
        ----------
        event : ClickEvent, optional
            The triggering UI event; its default action is prevented.
        opener : callable, optional
            Called with the resolved URL. Defaults to the system browser.

        Returns
        -------
        bool
            True if a link was opened.
        """
        if self.href is None:
            return False
        # Suppressed even if opening fails
        if event is not None:
            event.prevent_default()
        (opener or open_in_browser)(self.href)
        return True
