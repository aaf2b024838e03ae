# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the background command runner."""

from __future__ import annotations

import logging
import sys
import threading
import time
from pathlib import Path

import pytest

from flowscan.errors import SpawnError
from flowscan.execution.runner import CommandRunner, CommandStarter, run_buffered

_CHUNKED_SCRIPT = (
    "import sys, time\n"
    "for part in ('{\"errors\"', ': ', '[]}'):\n"
    "    sys.stdout.write(part)\n"
    "    sys.stdout.flush()\n"
    "    time.sleep(0.05)\n"
)


def test_run_buffered_accumulates_chunks(tmp_path: Path) -> None:
    output = run_buffered([sys.executable, "-c", _CHUNKED_SCRIPT], cwd=tmp_path)

    assert output == '{"errors": []}'


def test_run_buffered_ignores_exit_status_and_stderr(tmp_path: Path) -> None:
    script = "import sys; sys.stdout.write('partial'); sys.stderr.write('noise'); sys.exit(2)"

    assert run_buffered([sys.executable, "-c", script], cwd=tmp_path) == "partial"


def test_run_buffered_uses_working_directory(tmp_path: Path) -> None:
    script = "import os; print(os.getcwd(), end='')"

    output = run_buffered([sys.executable, "-c", script], cwd=tmp_path)

    assert Path(output).resolve() == tmp_path.resolve()


def test_run_buffered_reports_spawn_failure(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    missing = tmp_path / "node_modules" / ".bin" / "flow"

    with caplog.at_level(logging.ERROR, logger="flowscan.execution.runner"):
        with pytest.raises(SpawnError) as excinfo:
            run_buffered([str(missing), "--json"], cwd=tmp_path)

    assert excinfo.value.command == (str(missing), "--json")
    assert isinstance(excinfo.value.cause, OSError)
    assert "spawn-error" in caplog.text


def test_command_runner_delivers_through_future(tmp_path: Path) -> None:
    with CommandRunner() as runner:
        assert isinstance(runner, CommandStarter)
        future = runner.start(sys.executable, ["-c", "print('hello', end='')"], cwd=tmp_path)
        assert future.result(timeout=30) == "hello"


def test_command_runner_delivers_spawn_error_through_future(tmp_path: Path) -> None:
    with CommandRunner() as runner:
        future = runner.start(tmp_path / "missing-binary", [], cwd=tmp_path)
        assert isinstance(future.exception(timeout=30), SpawnError)


def test_blocked_commands_do_not_delay_later_ones(tmp_path: Path) -> None:
    runner = CommandRunner()
    blocked = [runner.start(sys.executable, ["-c", "import time; time.sleep(5)"], cwd=tmp_path) for _ in range(6)]

    started = time.monotonic()
    quick = runner.start(sys.executable, ["-c", "print('ready', end='')"], cwd=tmp_path)

    assert quick.result(timeout=4) == "ready"
    assert time.monotonic() - started < 4
    assert not any(future.done() for future in blocked)
    runner.shutdown(wait=False)


def test_reader_threads_are_daemons(tmp_path: Path) -> None:
    runner = CommandRunner()
    future = runner.start(sys.executable, ["-c", "import time; time.sleep(2)"], cwd=tmp_path)

    readers = [thread for thread in threading.enumerate() if thread.name.startswith("flowscan-reader")]

    assert readers
    assert all(thread.daemon for thread in readers)
    assert runner.active_count() >= 1
    runner.shutdown()
    assert future.done()
    assert runner.active_count() == 0
