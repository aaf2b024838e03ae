# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rendering helpers for scan results."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from ..filesystem import display_relative_path
from ..models import FileReport
from ..severity import Severity

_SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
}
_SEVERITY_LABELS = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
}


def render_json(reports: Mapping[str, FileReport]) -> str:
    """Return the reports as a JSON document keyed by file."""

    payload = {path: report.to_payload() for path, report in reports.items()}
    return json.dumps(payload, indent=2, sort_keys=True)


def render_table(reports: Mapping[str, FileReport], *, root: Path, console: Console) -> None:
    """Print one table row per diagnostic, using 1-based positions for humans."""

    table = Table(box=box.SIMPLE, expand=True)
    table.add_column("File", style="bold")
    table.add_column("Line", justify="right")
    table.add_column("Col", justify="right")
    table.add_column("Severity")
    table.add_column("Message", overflow="fold")
    for path, report in reports.items():
        display = display_relative_path(path, root)
        for diagnostic in report.errors:
            table.add_row(
                display,
                str(diagnostic.pos.line + 1),
                str(diagnostic.pos.ch + 1),
                f"[{_SEVERITY_STYLES[diagnostic.type]}]{_SEVERITY_LABELS[diagnostic.type]}[/]",
                diagnostic.message,
            )
    console.print(table)


def count_diagnostics(reports: Mapping[str, FileReport]) -> tuple[int, int]:
    """Return ``(errors, warnings)`` totals across ``reports``."""

    errors = warnings = 0
    for report in reports.values():
        for diagnostic in report.errors:
            if diagnostic.type is Severity.ERROR:
                errors += 1
            else:
                warnings += 1
    return errors, warnings


__all__ = ["count_diagnostics", "render_json", "render_table"]
