# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""High-level entry point producing Flow diagnostics for individual files."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import Future
from functools import partial
from pathlib import Path
from types import TracebackType
from typing import Final

from .config import ScanConfig
from .errors import InvocationTimeoutError
from .execution import Coalescer, CommandRunner, CommandStarter, chain_future, completed_future
from .execution.coalescer import TimerFactory, daemon_timer
from .models import Diagnostic, FileReport, FlowResult
from .parsers import create_report, parse_flow_output
from .project import flow_executable, has_flow_bin, has_flow_config, project_key

LOGGER = logging.getLogger(__name__)

MISSING_BIN_MESSAGE: Final[str] = (
    "FlowError: Can't locate node_modules/.bin/flow in your project, please install flow-bin"
)
TIMEOUT_MESSAGE_TEMPLATE: Final[str] = "FlowError: Timed out after waiting {timeout_ms}ms"


def timeout_report(timeout_ms: int) -> FileReport:
    """Return the report delivered when Flow does not answer in time."""

    return FileReport(errors=(Diagnostic.at_origin(TIMEOUT_MESSAGE_TEMPLATE.format(timeout_ms=timeout_ms)),))


def missing_bin_report() -> FileReport:
    """Return the report delivered when the project lacks a Flow install."""

    return FileReport(errors=(Diagnostic.at_origin(MISSING_BIN_MESSAGE),))


def _recover_timeout(error: BaseException) -> FileReport:
    if isinstance(error, InvocationTimeoutError):
        LOGGER.debug("reporting timeout for %s as a diagnostic", error.key)
        return timeout_report(error.timeout_ms)
    raise error


class FlowScanner:
    """Produce per-file Flow reports while running Flow at most once per project."""

    def __init__(
        self,
        config: ScanConfig | None = None,
        *,
        runner: CommandStarter | None = None,
        timer_factory: TimerFactory = daemon_timer,
    ) -> None:
        """Initialise the scanner.

        Args:
            config: Effective configuration; defaults to :class:`ScanConfig`.
            runner: Command starter used to launch Flow. A private
                :class:`CommandRunner` is created (and owned) when omitted.
            timer_factory: Timer factory forwarded to the coalescer.
        """

        self._config = config or ScanConfig()
        self._owned_runner: CommandRunner | None = None
        if runner is None:
            self._owned_runner = CommandRunner()
            runner = self._owned_runner
        self._runner = runner
        self._coalescer: Coalescer[FlowResult] = Coalescer(
            self._launch,
            timeout_ms=self._config.timeout_ms,
            timer_factory=timer_factory,
        )

    @property
    def config(self) -> ScanConfig:
        """Return the configuration the scanner was built with."""
        return self._config

    @property
    def coalescer(self) -> Coalescer[FlowResult]:
        """Expose the coalescer for introspection of in-flight projects."""
        return self._coalescer

    def _launch(self, key: str) -> Future[FlowResult]:
        output = self._runner.start(flow_executable(key), self._config.flow_args, cwd=Path(key))
        return chain_future(output, parse_flow_output)

    def get_diagnostics(self, project_root: str | Path, file_path: str | Path) -> Future[FileReport]:
        """Return a future resolving to the Flow report for ``file_path``.

        Projects without ``.flowconfig`` yield an empty report and projects
        without a local Flow binary yield an installation hint; neither runs
        Flow. A timeout resolves to a single diagnostic. Spawn and parse
        failures are left on the returned future.

        Args:
            project_root: Root directory of the project owning ``file_path``.
            file_path: File whose diagnostics are requested.

        Returns:
            Future[FileReport]: Report for the file.
        """

        if not has_flow_config(project_root):
            return completed_future(FileReport())
        if not has_flow_bin(project_root):
            return completed_future(missing_bin_report())
        pending = self._coalescer.invoke(project_key(project_root))
        return chain_future(pending, partial(create_report, file_path), recover=_recover_timeout)

    def scan_file(self, project_root: str | Path, file_path: str | Path) -> FileReport:
        """Block until the report for ``file_path`` is available.

        Raises:
            SpawnError: When Flow cannot be started.
            FlowOutputError: When Flow output cannot be parsed.
        """

        return self.get_diagnostics(project_root, file_path).result()

    def scan_files(self, project_root: str | Path, files: Iterable[str | Path]) -> dict[str, FileReport]:
        """Request every file at once so they share a single Flow run.

        Returns:
            dict[str, FileReport]: Reports keyed by the file argument as given.
        """

        pending = {str(path): self.get_diagnostics(project_root, path) for path in files}
        return {path: future.result() for path, future in pending.items()}

    def close(self) -> None:
        """Release the runner created by the scanner, if any."""

        if self._owned_runner is not None:
            self._owned_runner.shutdown(wait=False)

    def __enter__(self) -> FlowScanner:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


__all__ = [
    "MISSING_BIN_MESSAGE",
    "FlowScanner",
    "missing_bin_report",
    "timeout_report",
]
