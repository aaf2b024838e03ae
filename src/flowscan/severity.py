# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels reported to editor integrations."""

    ERROR = "problem_type_error"
    WARNING = "problem_type_warning"


FLOW_ERROR_LEVEL: Final[str] = "error"


def severity_from_level(level: str | None) -> Severity:
    """Map a Flow finding level onto a :class:`Severity`.

    Args:
        level: Level label reported by Flow (``"error"`` or ``"warning"``).

    Returns:
        Severity: ``ERROR`` for the ``"error"`` label, ``WARNING`` for anything else.
    """

    return Severity.ERROR if level == FLOW_ERROR_LEVEL else Severity.WARNING


__all__ = ["FLOW_ERROR_LEVEL", "Severity", "severity_from_level"]
