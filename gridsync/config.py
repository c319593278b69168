"""Configuration system for gridsync using pydantic-settings.

Supports layered configuration:
1. Built-in defaults (lowest priority)
2. pyproject.toml [tool.gridsync] section (project-level)
3. ./gridsync.toml (project-level, explicit)
4. ~/.config/gridsync/config.toml (user-level, overrides project)
5. File named by GRIDSYNC_CONFIG_FILE
6. Environment variables (highest priority)

Environment variables use GRIDSYNC_ prefix with nested delimiter __.
Example: GRIDSYNC_LOG__LEVEL, GRIDSYNC_LINK__SECURE_SCHEME
"""

from __future__ import annotations

import os
import sys

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .models import SelectionMode


if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


def _find_config_files() -> list[Path]:
    """Find all configuration files in order of precedence (lowest first)."""
    files = []

    pyproject = Path("pyproject.toml")
    if pyproject.exists():
        files.append(pyproject)

    gridsync_toml = Path("gridsync.toml")
    if gridsync_toml.exists():
        files.append(gridsync_toml)

    if sys.platform == "win32":
        user_config = Path(os.environ.get("APPDATA", "~")) / "gridsync" / "config.toml"
    else:
        user_config = Path("~/.config/gridsync/config.toml")
    user_config = user_config.expanduser()
    if user_config.exists():
        files.append(user_config)

    env_config = os.environ.get("GRIDSYNC_CONFIG_FILE")
    if env_config:
        env_path = Path(env_config)
        if env_path.exists():
            files.append(env_path)

    return files


def _load_toml_config() -> dict[str, Any]:
    """Load and merge all TOML configuration files."""
    merged: dict[str, Any] = {}

    for config_file in _find_config_files():
        try:
            data = tomllib.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            # Unreadable or malformed files do not block startup
            continue

        if config_file.name == "pyproject.toml":
            data = data.get("tool", {}).get("gridsync", {})

        merged = _deep_merge(merged, data)

    return merged


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class LogSettings(BaseSettings):
    """Logging settings.

    Environment prefix: GRIDSYNC_LOG__
    Example: GRIDSYNC_LOG__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="GRIDSYNC_LOG__",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: str = "%(name)s - %(levelname)s - %(message)s"


class LinkSettings(BaseSettings):
    """Link column settings.

    Environment prefix: GRIDSYNC_LINK__
    Example: GRIDSYNC_LINK__SECURE_SCHEME=http
    """

    model_config = SettingsConfigDict(
        env_prefix="GRIDSYNC_LINK__",
        extra="ignore",
    )

    secure_scheme: str = Field(
        default="https",
        description="Scheme prepended to hrefs starting with 'www.' before navigation",
    )
    icon_font: str = Field(
        default="Material Symbols Rounded",
        description="Font family used for link cells that display an icon",
    )
    open_new_tab: bool = Field(
        default=True,
        description="Open clicked links in a new browser tab instead of a new window",
    )

    @field_validator("secure_scheme", mode="after")
    @classmethod
    def strip_scheme_suffix(cls, v: str) -> str:
        """Accept 'https://' as well as 'https'."""
        return v.removesuffix("://").strip() or "https"


class SelectionSettings(BaseSettings):
    """Default selection settings.

    Used when a grid is created without explicit selection modes.

    Environment prefix: GRIDSYNC_SELECTION__
    Example: GRIDSYNC_SELECTION__DEFAULT_MODES="multi-row,single-column"
    """

    model_config = SettingsConfigDict(
        env_prefix="GRIDSYNC_SELECTION__",
        extra="ignore",
    )

    default_modes: Annotated[list[SelectionMode], NoDecode] = Field(default_factory=list)

    @field_validator("default_modes", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: Any) -> list[str]:
        """Parse comma-separated strings from env vars."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v or []


class GridSyncSettings(BaseSettings):
    """Main settings aggregating all configuration sections.

    Environment prefix: GRIDSYNC__

    Configuration sources (in order of precedence):
    1. Built-in defaults
    2. pyproject.toml [tool.gridsync] section
    3. ./gridsync.toml (project-level)
    4. ~/.config/gridsync/config.toml (user-level, overrides project)
    5. File named by GRIDSYNC_CONFIG_FILE
    6. Environment variables (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="GRIDSYNC__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log: LogSettings = Field(default_factory=LogSettings)
    link: LinkSettings = Field(default_factory=LinkSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)

    def __init__(self, **data: Any) -> None:
        toml_config = _load_toml_config()

        # Sections found in files are built here so their env vars still win
        for name, section_cls in _SECTIONS.items():
            if isinstance(toml_config.get(name), dict):
                toml_config[name] = _section_from_file(section_cls, toml_config[name])

        # Explicit keyword arguments take precedence over files
        merged = _deep_merge(toml_config, data)

        super().__init__(**merged)


_SECTIONS: dict[str, type[BaseSettings]] = {
    "log": LogSettings,
    "link": LinkSettings,
    "selection": SelectionSettings,
}


def _section_from_file(section_cls: type[BaseSettings], values: dict[str, Any]) -> BaseSettings:
    """Build a settings section from file values, skipping fields set in the environment."""
    prefix = section_cls.model_config.get("env_prefix", "").upper()
    env_names = {key.upper() for key in os.environ}
    from_file = {
        key: value
        for key, value in values.items()
        if f"{prefix}{key}".upper() not in env_names
    }
    return section_cls(**from_file)


@lru_cache(maxsize=1)
def get_settings() -> GridSyncSettings:
    """Get the global settings instance (cached).

    Call clear_settings() to reload configuration.
    """
    return GridSyncSettings()


def clear_settings() -> None:
    """Clear the cached settings to force reload."""
    get_settings.cache_clear()


def reload_settings() -> GridSyncSettings:
    """Reload settings from all sources."""
    clear_settings()
    return get_settings()
