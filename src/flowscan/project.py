# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Project layout checks deciding whether Flow can run for a project."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Final

from .filesystem import canonical_path, is_regular_file

FLOW_CONFIG_NAME: Final[str] = ".flowconfig"
FLOW_BIN_DIR: Final[tuple[str, ...]] = ("node_modules", ".bin")
FLOW_BIN_NAME: Final[str] = "flow"
FLOW_BIN_NAME_WINDOWS: Final[str] = "flow.cmd"


def project_key(project_root: str | Path) -> str:
    """Return the coalescing key identifying ``project_root``."""

    return canonical_path(project_root)


def has_flow_config(project_root: str | Path) -> bool:
    """Return ``True`` when the project opts into Flow via ``.flowconfig``."""

    return is_regular_file(Path(project_root) / FLOW_CONFIG_NAME)


def has_flow_bin(project_root: str | Path) -> bool:
    """Return ``True`` when the project has a local ``flow-bin`` install."""

    return is_regular_file(Path(project_root).joinpath(*FLOW_BIN_DIR, FLOW_BIN_NAME))


def flow_executable(project_root: str | Path, *, platform: str | None = None) -> Path:
    """Return the absolute path of the Flow launcher inside ``project_root``.

    Args:
        project_root: Root directory of the project being analysed.
        platform: Optional ``sys.platform`` override used to pick the launcher name.

    Returns:
        Path: ``node_modules/.bin/flow`` or ``flow.cmd`` on Windows.
    """

    active_platform = platform if platform is not None else sys.platform
    name = FLOW_BIN_NAME_WINDOWS if active_platform == "win32" else FLOW_BIN_NAME
    return Path(canonical_path(project_root)).joinpath(*FLOW_BIN_DIR, name)


__all__ = [
    "FLOW_CONFIG_NAME",
    "flow_executable",
    "has_flow_bin",
    "has_flow_config",
    "project_key",
]
