# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and loaders for flowscan."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

DEFAULT_TIMEOUT_MS: Final[int] = 3000
DEFAULT_FLOW_ARGS: Final[tuple[str, ...]] = ("--show-all-errors", "--json")

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "flowscan"
CONFIG_FILENAME: Final[str] = ".flowscan.toml"


class ScanConfig(BaseModel):
    """Effective settings for a scanner instance."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    flow_args: tuple[str, ...] = DEFAULT_FLOW_ARGS

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible snapshot of the configuration."""
        return self.model_dump(mode="json")


def _read_toml(path: Path) -> Mapping[str, Any]:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    return data


def _pyproject_section(path: Path) -> Mapping[str, Any]:
    document = _read_toml(path)
    tool_section = document.get(PYPROJECT_TOOL_KEY, {})
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY, {})
    if not isinstance(section, Mapping):
        raise ConfigError(f"[{PYPROJECT_TOOL_KEY}.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return section


def _validate(data: Mapping[str, Any], *, source: str) -> ScanConfig:
    try:
        return ScanConfig.model_validate(dict(data))
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration from {source}: {exc}") from exc


def load_config(root: Path, *, overrides: Mapping[str, Any] | None = None) -> ScanConfig:
    """Load configuration for ``root`` layering every supported source.

    Sources are applied in order: built-in defaults, ``[tool.flowscan]`` in
    ``pyproject.toml``, ``.flowscan.toml``, then ``overrides``. Each layer is
    validated on its own so errors name the offending source.

    Args:
        root: Project directory holding the configuration files.
        overrides: Explicit values (typically CLI flags); ``None`` entries are ignored.

    Returns:
        ScanConfig: Validated, merged configuration.

    Raises:
        ConfigError: When a source cannot be parsed or holds invalid values.
    """

    merged: MutableMapping[str, Any] = {}
    layers: list[tuple[str, Mapping[str, Any]]] = [
        (str(root / PYPROJECT_FILENAME), _pyproject_section(root / PYPROJECT_FILENAME)),
        (str(root / CONFIG_FILENAME), _read_toml(root / CONFIG_FILENAME)),
        ("overrides", {key: value for key, value in (overrides or {}).items() if value is not None}),
    ]
    for source, fragment in layers:
        if not fragment:
            continue
        _validate(fragment, source=source)
        merged.update(fragment)
    return _validate(merged, source=str(root))


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_FLOW_ARGS",
    "DEFAULT_TIMEOUT_MS",
    "ScanConfig",
    "load_config",
]
