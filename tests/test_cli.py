# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the flowscan command-line interface."""

from __future__ import annotations

import importlib
import json
import subprocess  # nosec B404 - runs the CLI in a fresh interpreter
import sys
import time
from collections.abc import Iterable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from flowscan.cli.app import EXIT_DIAGNOSTICS, EXIT_FAILURE, EXIT_OK, app
from flowscan.config import ScanConfig
from flowscan.errors import SpawnError
from flowscan.models import Diagnostic, FileReport, Position
from flowscan.severity import Severity


class _FakeScanner:
    """Scanner double returning canned reports."""

    instances: list[_FakeScanner] = []
    reports: dict[str, FileReport] = {}
    error: Exception | None = None

    def __init__(self, config: ScanConfig) -> None:
        self.config = config
        self.closed = False
        _FakeScanner.instances.append(self)

    def scan_files(self, project_root: Path, files: Iterable[Path]) -> dict[str, FileReport]:
        if _FakeScanner.error is not None:
            raise _FakeScanner.error
        return {str(path): _FakeScanner.reports.get(str(path), FileReport()) for path in files}

    def __enter__(self) -> _FakeScanner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True


@pytest.fixture
def fake_scanner(monkeypatch: pytest.MonkeyPatch) -> type[_FakeScanner]:
    _FakeScanner.instances = []
    _FakeScanner.reports = {}
    _FakeScanner.error = None
    monkeypatch.setattr(importlib.import_module("flowscan.cli.app"), "FlowScanner", _FakeScanner)
    return _FakeScanner


def test_check_without_flowconfig_reports_nothing(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["check", str(tmp_path), str(tmp_path / "a.js"), "--json"])

    assert result.exit_code == EXIT_OK
    assert json.loads(result.stdout) == {str(tmp_path / "a.js"): {"errors": []}}


def test_check_json_output_and_exit_code(tmp_path: Path, fake_scanner: type[_FakeScanner]) -> None:
    target = str(tmp_path / "a.js")
    fake_scanner.reports = {
        target: FileReport(errors=(Diagnostic(type=Severity.ERROR, message="bad", pos=Position(line=4, ch=2)),)),
    }
    runner = CliRunner()

    result = runner.invoke(app, ["check", str(tmp_path), target, str(tmp_path / "b.js"), "--json", "--timeout-ms", "900"])

    assert result.exit_code == EXIT_DIAGNOSTICS
    payload = json.loads(result.stdout)
    assert payload[target] == {"errors": [{"type": "problem_type_error", "message": "bad", "pos": {"line": 4, "ch": 2}}]}
    assert payload[str(tmp_path / "b.js")] == {"errors": []}
    [scanner] = fake_scanner.instances
    assert scanner.config.timeout_ms == 900
    assert scanner.closed


def test_check_table_output_for_warnings(tmp_path: Path, fake_scanner: type[_FakeScanner]) -> None:
    target = str(tmp_path / "a.js")
    fake_scanner.reports = {
        target: FileReport(
            errors=(Diagnostic(type=Severity.WARNING, message="unused variable", pos=Position(line=0, ch=0)),),
        ),
    }
    runner = CliRunner()

    result = runner.invoke(app, ["check", str(tmp_path), target, "--no-color", "--no-emoji"])

    assert result.exit_code == EXIT_OK
    assert "unused variable" in result.stdout
    assert "0 error(s), 1 warning(s)" in result.stdout


def test_check_reports_propagated_failures(tmp_path: Path, fake_scanner: type[_FakeScanner]) -> None:
    fake_scanner.error = SpawnError(["flow"], FileNotFoundError("flow"))
    runner = CliRunner()

    result = runner.invoke(app, ["check", str(tmp_path), str(tmp_path / "a.js"), "--no-emoji"])

    assert result.exit_code == EXIT_FAILURE


def test_check_rejects_invalid_configuration(tmp_path: Path, fake_scanner: type[_FakeScanner]) -> None:
    (tmp_path / ".flowscan.toml").write_text("timeout_ms = -1\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["check", str(tmp_path), str(tmp_path / "a.js")])

    assert result.exit_code == EXIT_FAILURE
    assert fake_scanner.instances == []


def test_doctor_reports_missing_flow(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["doctor", str(tmp_path), "--no-emoji"])

    assert result.exit_code == EXIT_DIAGNOSTICS
    assert ".flowconfig missing" in result.stdout
    assert "timeout: 3000ms" in result.stdout


def test_doctor_healthy_project(flow_project: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["doctor", str(flow_project), "--no-emoji"])

    assert result.exit_code == EXIT_OK
    assert ".flowconfig found" in result.stdout


@pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script as the Flow binary")
def test_check_exits_promptly_when_flow_hangs(flow_project: Path, fake_flow) -> None:
    fake_flow(flow_project, "sleep 30")
    target = str(flow_project / "a.js")
    command = [
        sys.executable,
        "-c",
        "from flowscan.cli import main; main()",
        "check",
        str(flow_project),
        target,
        "--json",
        "--timeout-ms",
        "200",
    ]

    started = time.monotonic()
    # Bandit: fixed argument list built from the running interpreter.
    completed = subprocess.run(command, capture_output=True, text=True, timeout=15, check=False)  # nosec B603
    elapsed = time.monotonic() - started

    assert elapsed < 10
    assert completed.returncode == EXIT_DIAGNOSTICS
    payload = json.loads(completed.stdout)
    assert payload[target]["errors"][0]["message"] == "FlowError: Timed out after waiting 200ms"
