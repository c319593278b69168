"""Pytest configuration and fixtures."""

from __future__ import annotations

import os

from typing import TYPE_CHECKING, Any

import pytest

from gridsync.models import ColumnDefinition, ColumnKind


if TYPE_CHECKING:
    from collections.abc import Callable, Generator


# =============================================================================
# Settings & Logger Isolation - SINGLE SOURCE OF TRUTH
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[None, None, None]:
    """Isolate every test from config files and GRIDSYNC_* env vars.

    Runs each test from an empty directory so no pyproject.toml or
    gridsync.toml is picked up, and resets the cached settings and logger.
    """
    from gridsync.config import clear_settings
    from gridsync.log import reset_logger

    for var in list(os.environ):
        if var.startswith("GRIDSYNC"):
            monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))
    monkeypatch.chdir(tmp_path)

    clear_settings()
    reset_logger()
    yield
    clear_settings()
    reset_logger()


# =============================================================================
# Shared Test Helpers
# =============================================================================


class RecordingEmitter:
    """Collects ``emit(event_type, data)`` calls in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, event_type: str, data: dict[str, Any]) -> None:
        self.events.append((event_type, data))

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        """Payloads of all events of one type."""
        return [data for event, data in self.events if event == event_type]


class RecordingSync:
    """Collects ``on_sync(selection, sync_cells)`` calls in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, bool]] = []

    def __call__(self, selection: Any, sync_cells: bool) -> None:
        self.calls.append((selection, sync_cells))


class FakeClickEvent:
    """Click event that records whether its default action was prevented."""

    def __init__(self) -> None:
        self.default_prevented = False

    def prevent_default(self) -> None:
        self.default_prevented = True


@pytest.fixture
def emitter() -> RecordingEmitter:
    """Fresh recording emitter."""
    return RecordingEmitter()


@pytest.fixture
def on_sync() -> RecordingSync:
    """Fresh recording selection sync callback."""
    return RecordingSync()


@pytest.fixture
def click_event() -> FakeClickEvent:
    """Fresh click event."""
    return FakeClickEvent()


@pytest.fixture
def make_column() -> Callable[..., ColumnDefinition]:
    """Factory for link column definitions.

    ``make_column("url", validate="^https://")`` puts unknown keyword
    arguments into the column's type options.
    """
    fields = set(ColumnDefinition.model_fields)

    def _make(column_id: str = "url", **kwargs: Any) -> ColumnDefinition:
        options = {k: kwargs.pop(k) for k in list(kwargs) if k not in fields}
        kwargs.setdefault("name", column_id)
        kwargs.setdefault("title", column_id.title())
        kwargs.setdefault("kind", ColumnKind.LINK)
        return ColumnDefinition(id=column_id, column_type_options=options, **kwargs)

    return _make


@pytest.fixture
def grid_columns(make_column) -> list[ColumnDefinition]:
    """Index column at position 0 followed by three link columns."""
    return [
        make_column("_index", name="", title="", is_index=True),
        make_column("colA", is_editable=True),
        make_column("colB", is_editable=True, max_chars=10),
        make_column("colC"),
    ]
