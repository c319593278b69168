"""gridsync exception hierarchy.

Malformed external input (column options, cell values, candidate
selections) never raises; it degrades to error cells or skipped syncs.
These exceptions signal programming errors, such as addressing a column
that does not exist in the grid.
"""

from __future__ import annotations

from typing import Any


class GridSyncException(Exception):
    """Base exception for all gridsync errors."""

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize gridsync exception.

        Parameters
        ----------
        message : str
            Human-readable error message.
        **context : Any
            Additional context (column_id, kind, etc.).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Format exception with context."""
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class ColumnNotFoundError(GridSyncException):
    """A column id is not part of the grid.

    Raised when a cell, edit, or visibility operation addresses a column
    that was not among the grid's column definitions.
    """

    def __init__(self, message: str, column_id: str | None = None, **context: Any) -> None:
        """Initialize column lookup error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        column_id : str, optional
            The column id that could not be resolved.
        **context : Any
            Additional context.
        """
        super().__init__(message, column_id=column_id, **context)
        self.column_id = column_id


class UnknownColumnKindError(GridSyncException):
    """No column implementation exists for a kind."""

    def __init__(self, message: str, kind: str | None = None, **context: Any) -> None:
        """Initialize unknown kind error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        kind : str, optional
            The kind tag that has no implementation.
        **context : Any
            Additional context.
        """
        super().__init__(message, kind=kind, **context)
        self.kind = kind
