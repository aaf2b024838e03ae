# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Filesystem helpers used by the scanner."""

from __future__ import annotations

from .paths import canonical_path, display_relative_path, is_regular_file

__all__ = ("canonical_path", "display_relative_path", "is_regular_file")
