# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers turning analyser output into file-scoped reports."""

from __future__ import annotations

from .flow import create_report, parse_flow_output

__all__ = ["create_report", "parse_flow_output"]
