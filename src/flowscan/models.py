# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the flowscan package."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .severity import Severity

COMMENT_MESSAGE_TYPE = "Comment"


class FlowMessage(BaseModel):
    """Single message entry of a Flow finding."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    path: str = ""
    type: str = ""
    descr: str
    line: int
    start: int

    @property
    def is_comment(self) -> bool:
        """Return ``True`` when the message annotates its siblings instead of locating a problem."""
        return self.type == COMMENT_MESSAGE_TYPE


class FlowError(BaseModel):
    """Finding reported by Flow, possibly spanning several messages."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    level: str
    message: tuple[FlowMessage, ...] = Field(default_factory=tuple)


class FlowResult(BaseModel):
    """Parsed output of one ``flow --json`` invocation."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    errors: tuple[FlowError, ...] = Field(default_factory=tuple)


class Position(BaseModel):
    """Zero-based line and column of a diagnostic."""

    model_config = ConfigDict(frozen=True)

    line: int
    ch: int


class Diagnostic(BaseModel):
    """Normalized, file-scoped diagnostic returned to callers."""

    model_config = ConfigDict(frozen=True)

    type: Severity
    message: str
    pos: Position

    @classmethod
    def at_origin(cls, message: str, *, severity: Severity = Severity.ERROR) -> Diagnostic:
        """Build a diagnostic pinned to the first character of the file."""
        return cls(type=severity, message=message, pos=Position(line=0, ch=0))


class FileReport(BaseModel):
    """Ordered diagnostics for exactly one file."""

    model_config = ConfigDict(frozen=True)

    errors: tuple[Diagnostic, ...] = Field(default_factory=tuple)

    def has_errors(self) -> bool:
        """Return ``True`` when any diagnostic carries error severity."""
        return any(diag.type is Severity.ERROR for diag in self.errors)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-compatible payload handed to editor integrations."""
        return self.model_dump(mode="json")


__all__ = [
    "COMMENT_MESSAGE_TYPE",
    "Diagnostic",
    "FileReport",
    "FlowError",
    "FlowMessage",
    "FlowResult",
    "Position",
]
