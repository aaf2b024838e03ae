# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parse Flow JSON output and map it onto per-file reports."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..errors import FlowOutputError
from ..filesystem import canonical_path
from ..models import Diagnostic, FileReport, FlowError, FlowResult, Position
from ..severity import severity_from_level

LOGGER = logging.getLogger(__name__)

_COMMENT_SEPARATOR = " "
_PREFIX_SEPARATOR = ": "


def parse_flow_output(stdout: str) -> FlowResult:
    """Parse the stdout of ``flow --json`` into a :class:`FlowResult`.

    Args:
        stdout: Text captured from the Flow process.

    Returns:
        FlowResult: Validated findings in their original order.

    Raises:
        FlowOutputError: If ``stdout`` is not JSON or does not match the expected shape.
    """

    try:
        payload = json.loads(stdout)
        return FlowResult.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as exc:
        LOGGER.error("parse-error: unable to read Flow output", exc_info=exc)
        raise FlowOutputError(f"Unable to parse Flow output: {exc}") from exc


def _comment_prefix(finding: FlowError) -> str | None:
    comments = [message.descr for message in finding.message if message.is_comment]
    return _COMMENT_SEPARATOR.join(comments) if comments else None


def create_report(file_path: str | Path, result: FlowResult) -> FileReport:
    """Build the report for ``file_path`` from a project-wide Flow result.

    Comment messages of a finding are joined into a prefix applied to every
    other message of the same finding. Messages located in other files are
    dropped. Flow positions are 1-based; reported positions are 0-based.

    Args:
        file_path: File whose diagnostics are requested.
        result: Parsed Flow output for the whole project.

    Returns:
        FileReport: Diagnostics in finding order, then message order.
    """

    target = canonical_path(file_path)
    diagnostics: list[Diagnostic] = []
    for finding in result.errors:
        prefix = _comment_prefix(finding)
        severity = severity_from_level(finding.level)
        for message in finding.message:
            if message.is_comment:
                continue
            if not message.path or canonical_path(message.path) != target:
                continue
            text = f"{prefix}{_PREFIX_SEPARATOR}{message.descr}" if prefix is not None else message.descr
            diagnostics.append(
                Diagnostic(
                    type=severity,
                    message=text,
                    pos=Position(line=message.line - 1, ch=message.start - 1),
                ),
            )
    return FileReport(errors=tuple(diagnostics))


__all__ = ["create_report", "parse_flow_output"]
