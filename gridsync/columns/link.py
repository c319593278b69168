"""Link column: interprets cell values as hyperlinks.

Options (``ColumnDefinition.column_type_options``):

- ``max_chars``: maximum number of characters of an entered href.
- ``validate``: regular expression an entered href must match.
- ``display_text``: text shown instead of the href. Either a literal, a
  regular expression with a capture group that extracts part of the
  href, or a material icon such as ``":material/open_in_new:"``.

A ``validate`` pattern that does not compile turns every cell of the
column into the same error cell. A ``display_text`` that looks like a
pattern but does not compile is shown as literal text.
"""

from __future__ import annotations

import re

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config import get_settings
from ..log import debug, warn
from ..models import Cell, CellKind, ColumnDefinition, ColumnKind
from .base import (
    BaseColumn,
    get_error_cell,
    get_link_display_value_from_regex,
    is_material_icon,
    parse_icon_pack_entry,
    to_safe_string,
)


# u: unicode, s: dot matches newlines
REGEX_FLAGS = re.UNICODE | re.DOTALL

INVALID_INPUT_MESSAGE = "Invalid input."


class LinkColumnConfig(BaseModel):
    """Typed options of a link column."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    max_chars: int | None = Field(default=None, ge=0)
    validate_pattern: str | None = Field(default=None, alias="validate")
    display_text: str | None = None

    @classmethod
    def parse(cls, options: dict[str, Any], column_id: str) -> LinkColumnConfig:
        """Parse options, dropping keys whose values have the wrong type.

        Parameters
        ----------
        options : dict
            Raw options of the column.
        column_id : str
            Column id, used in log messages.
        """
        try:
            return cls.model_validate(options)
        except ValidationError as e:
            invalid = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
            warn(f"Ignoring invalid link options {sorted(invalid)} for column '{column_id}': {e}")
            return cls.model_validate({k: v for k, v in options.items() if k not in invalid})


def compile_validate_regex(pattern: str | None) -> re.Pattern[str] | str | None:
    """Compile a ``validate`` pattern.

    Returns
    -------
    re.Pattern or str or None
        The compiled pattern, an error message if it does not compile, or
        None if no pattern is configured.
    """
    if not pattern:
        return None
    try:
        return re.compile(pattern, REGEX_FLAGS)
    except re.error as e:
        return f"Invalid validate regex: {pattern}.\nError: {e}"


def normalize_href(href: str) -> str:
    """Turn a ``www.`` href into an absolute URL; other hrefs are unchanged."""
    if href.startswith("www."):
        return f"{get_settings().link.secure_scheme}://{href}"
    return href


class LinkColumn(BaseColumn):
    """Column whose cells are clickable links."""

    kind: ClassVar[ColumnKind] = ColumnKind.LINK
    is_editable_type: ClassVar[bool] = True

    def __init__(self, definition: ColumnDefinition) -> None:
        super().__init__(definition)
        self.config = LinkColumnConfig.parse(definition.column_type_options, definition.id)

        self.validate_regex = compile_validate_regex(self.config.validate_pattern)
        self._config_error_cell: Cell | None = None
        if isinstance(self.validate_regex, str):
            warn(f"Column '{definition.id}': {self.validate_regex}")
            self._config_error_cell = get_error_cell(self.validate_regex)

        self.uses_display_icon = False
        self.display_text = self.config.display_text
        self.display_text_regex: re.Pattern[str] | None = None
        if self.display_text is not None:
            if is_material_icon(self.display_text):
                # Only the icon name, so the icon font can resolve it
                self.display_text = parse_icon_pack_entry(self.display_text)[1]
                self.uses_display_icon = True
            elif "(" in self.display_text and ")" in self.display_text:
                try:
                    self.display_text_regex = re.compile(self.display_text, REGEX_FLAGS)
                except re.error as e:
                    debug(
                        f"Column '{definition.id}': display_text {self.display_text!r} "
                        f"is used as literal text ({e})"
                    )

        self._template: dict[str, Any] = {
            "kind": CellKind.URI,
            "readonly": not self.is_editable,
            "allow_overlay": not self.uses_display_icon,
            "content_align": definition.content_alignment
            or ("center" if self.uses_display_icon else None),
            "hover_effect": True,
            "theme_override": (
                {"fontFamily": get_settings().link.icon_font, "linkColor": None}
                if self.uses_display_icon
                else None
            ),
        }

    def validate_input(self, value: Any) -> bool:
        """Check an href against the column rules.

        Rules are applied in order and the first failing rule wins:
        required, then ``max_chars``, then the ``validate`` pattern.
        """
        if value is None:
            return not self.definition.is_required

        href = to_safe_string(value)

        if self.config.max_chars and len(href) > self.config.max_chars:
            return False

        if isinstance(self.validate_regex, re.Pattern) and self.validate_regex.search(href) is None:
            return False

        return True

    def get_cell(self, data: Any, validate: bool = False) -> Cell:
        """Build the link cell for an href.

        Parameters
        ----------
        data : Any
            The href, None for a missing value.
        validate : bool, optional
            Return an ``"Invalid input."`` error cell if ``data`` fails
            ``validate_input``.

        Returns
        -------
        Cell
            A link cell, a missing-value cell, or an error cell.
        """
        if self._config_error_cell is not None:
            return self._config_error_cell

        if data is None:
            return Cell(
                **{**self._template, "theme_override": None},
                data=None,
                is_missing_value=True,
            )

        href = to_safe_string(data)

        if validate and not self.validate_input(data):
            return get_error_cell(href, INVALID_INPUT_MESSAGE)

        display_text = ""
        if href:
            if self.display_text_regex is not None:
                display_text = get_link_display_value_from_regex(self.display_text_regex, href)
            else:
                display_text = self.display_text or href

        return Cell(
            **self._template,
            data=href,
            display_data=display_text,
            copy_data=href,
            href=normalize_href(href) if href else None,
        )

    def get_cell_value(self, cell: Cell) -> str | None:
        """Return the href stored in a cell."""
        if cell.is_missing_value or cell.data is None:
            return None
        return cell.data
