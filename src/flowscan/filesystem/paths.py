# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reasoning about filesystem paths."""

from __future__ import annotations

import os
from os import PathLike
from pathlib import Path

_Pathish = str | PathLike[str] | Path


def canonical_path(path: _Pathish) -> str:
    """Return the absolute, normalised string form of ``path``.

    Symlinks are not followed so that two spellings of the same location
    compare equal exactly when their lexical absolute forms match.

    Args:
        path: Filesystem path supplied by the caller.

    Returns:
        str: Absolute path with ``.`` and ``..`` segments collapsed.

    Raises:
        ValueError: If ``path`` is ``None``.

    """

    if path is None:
        raise ValueError("path must not be None")
    return os.path.abspath(os.fspath(Path(path).expanduser()))


def is_regular_file(path: _Pathish) -> bool:
    """Return ``True`` when ``path`` exists and is a regular file.

    Args:
        path: Candidate file path.

    Returns:
        bool: ``False`` for missing paths, directories, and unreadable entries.

    """

    try:
        return Path(path).is_file()
    except OSError:
        return False


def display_relative_path(path: _Pathish, root: _Pathish) -> str:
    """Return a display-friendly representation of ``path`` relative to ``root``.

    Args:
        path: Path to present to the user.
        root: Base directory used for relativisation.

    Returns:
        str: Relative POSIX path when ``path`` lives under ``root``, otherwise the
        canonical absolute representation.

    """

    candidate = Path(canonical_path(path))
    try:
        return candidate.relative_to(canonical_path(root)).as_posix()
    except ValueError:
        return candidate.as_posix()


__all__ = (
    "canonical_path",
    "display_relative_path",
    "is_regular_file",
)
