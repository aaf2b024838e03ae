# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

from pathlib import Path
from typing import Final

import typer

from ..config import ScanConfig, load_config
from ..errors import ConfigError, FlowScanError
from ..logging import enable_verbose_logging, fail, info, ok, warn
from ..orchestrator import FlowScanner
from ..project import flow_executable, has_flow_bin, has_flow_config
from ..runtime.console import detect_tty, get_console_manager
from .reporting import count_diagnostics, render_json, render_table

EXIT_OK: Final[int] = 0
EXIT_DIAGNOSTICS: Final[int] = 1
EXIT_FAILURE: Final[int] = 2

app = typer.Typer(
    help="Run Flow once per project and report diagnostics per file.",
    no_args_is_help=True,
    add_completion=False,
)


def _load(root: Path, timeout_ms: int | None, *, use_emoji: bool) -> ScanConfig:
    try:
        return load_config(root, overrides={"timeout_ms": timeout_ms})
    except ConfigError as exc:
        fail(str(exc), use_emoji=use_emoji)
        raise typer.Exit(code=EXIT_FAILURE) from exc


@app.command("check")
def check_command(
    root: Path = typer.Argument(..., help="Project root containing .flowconfig."),
    files: list[Path] = typer.Argument(..., help="Files to report diagnostics for."),
    timeout_ms: int | None = typer.Option(None, "--timeout-ms", min=1, help="Override the Flow timeout."),
    as_json: bool = typer.Option(False, "--json", help="Emit reports as JSON keyed by file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Stream debug logging to stderr."),
    color: bool = typer.Option(True, "--color/--no-color", help="Toggle ANSI colour output."),
    use_emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji prefixes."),
) -> None:
    """Report Flow diagnostics for FILES inside ROOT."""

    if verbose:
        enable_verbose_logging()
    config = _load(root, timeout_ms, use_emoji=use_emoji)
    with FlowScanner(config) as scanner:
        try:
            reports = scanner.scan_files(root, files)
        except FlowScanError as exc:
            fail(f"Flow failed: {exc}", use_emoji=use_emoji)
            raise typer.Exit(code=EXIT_FAILURE) from exc

    errors, warnings = count_diagnostics(reports)
    if as_json:
        typer.echo(render_json(reports))
    else:
        console = get_console_manager().get(color=color and detect_tty(), emoji=use_emoji)
        if errors or warnings:
            render_table(reports, root=root, console=console)
            warn(f"{errors} error(s), {warnings} warning(s)", use_emoji=use_emoji, use_color=color)
        else:
            ok("No Flow diagnostics", use_emoji=use_emoji, use_color=color)
    raise typer.Exit(code=EXIT_DIAGNOSTICS if errors else EXIT_OK)


@app.command("doctor")
def doctor_command(
    root: Path = typer.Argument(Path("."), help="Project root to inspect."),
    use_emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji prefixes."),
) -> None:
    """Check whether Flow can run for ROOT and show the effective configuration."""

    config = _load(root, None, use_emoji=use_emoji)
    healthy = True
    if has_flow_config(root):
        ok(".flowconfig found", use_emoji=use_emoji)
    else:
        warn(".flowconfig missing; Flow checks are disabled for this project", use_emoji=use_emoji)
        healthy = False
    if has_flow_bin(root):
        ok(f"Flow binary found at {flow_executable(root)}", use_emoji=use_emoji)
    else:
        warn("node_modules/.bin/flow missing; install flow-bin", use_emoji=use_emoji)
        healthy = False
    info(f"timeout: {config.timeout_ms}ms", use_emoji=use_emoji)
    info(f"flow args: {' '.join(config.flow_args)}", use_emoji=use_emoji)
    raise typer.Exit(code=EXIT_OK if healthy else EXIT_DIAGNOSTICS)


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]
