# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy raised by the flowscan engine."""

from __future__ import annotations

from collections.abc import Sequence


class FlowScanError(Exception):
    """Base class for all flowscan failures."""


class ConfigError(FlowScanError):
    """Raised when configuration input is invalid."""


class SpawnError(FlowScanError):
    """Raised when the external command could not be started."""

    def __init__(self, command: Sequence[str], cause: OSError) -> None:
        """Initialise the error with the failing command and its cause.

        Args:
            command: Executable followed by its arguments.
            cause: Operating system error reported while spawning.
        """

        super().__init__(f"Failed to start '{command[0]}': {cause}")
        self.command = tuple(command)
        self.cause = cause


class FlowOutputError(FlowScanError):
    """Raised when Flow output cannot be parsed into the expected shape."""


class InvocationTimeoutError(FlowScanError):
    """Raised when an invocation does not settle within its timeout."""

    def __init__(self, key: str, timeout_ms: int) -> None:
        super().__init__(f"Invocation for '{key}' timed out after {timeout_ms}ms")
        self.key = key
        self.timeout_ms = timeout_ms


__all__ = [
    "ConfigError",
    "FlowOutputError",
    "FlowScanError",
    "InvocationTimeoutError",
    "SpawnError",
]
