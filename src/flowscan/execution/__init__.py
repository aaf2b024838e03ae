# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Execution helpers: command runner, futures plumbing, and coalescing."""

from __future__ import annotations

from .coalescer import Coalescer, InvocationSlot, daemon_timer
from .futures import chain_future, completed_future
from .runner import CommandRunner, CommandStarter, drain, run_buffered, spawn

__all__ = (
    "Coalescer",
    "CommandRunner",
    "CommandStarter",
    "InvocationSlot",
    "chain_future",
    "completed_future",
    "daemon_timer",
    "drain",
    "run_buffered",
    "spawn",
)
