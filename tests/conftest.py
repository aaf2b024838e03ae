# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
import stat
from collections.abc import Callable, Sequence
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path

import pytest


@dataclass
class ManualTimer:
    """Timer double fired explicitly by tests."""

    interval: float
    function: Callable[..., None]
    args: tuple[object, ...]
    started: bool = False
    cancelled: bool = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function(*self.args)


@dataclass
class ManualTimers:
    """Timer factory recording every timer it creates."""

    created: list[ManualTimer] = field(default_factory=list)

    def __call__(self, interval: float, function: Callable[..., None], args: tuple[object, ...]) -> ManualTimer:
        timer = ManualTimer(interval, function, args)
        self.created.append(timer)
        return timer


@dataclass
class StartCall:
    executable: Path
    args: tuple[str, ...]
    cwd: Path
    future: Future[str]


@dataclass
class StubRunner:
    """Command starter returning futures the test resolves by hand."""

    calls: list[StartCall] = field(default_factory=list)

    def start(self, executable: str | Path, args: Sequence[str], *, cwd: Path) -> Future[str]:
        future: Future[str] = Future()
        self.calls.append(StartCall(Path(executable), tuple(args), cwd, future))
        return future


@pytest.fixture
def manual_timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def stub_runner() -> StubRunner:
    return StubRunner()


@pytest.fixture
def flow_project(tmp_path: Path) -> Path:
    """Return a project root with ``.flowconfig`` and a local Flow binary."""

    root = tmp_path / "project"
    bin_dir = root / "node_modules" / ".bin"
    bin_dir.mkdir(parents=True)
    (root / ".flowconfig").write_text("[options]\n", encoding="utf-8")
    (bin_dir / "flow").write_text("#!/bin/sh\n", encoding="utf-8")
    return root


def _flow_payload(root: Path, *findings: tuple[str, list[dict[str, object]]]) -> str:
    """Serialise Flow-style findings, resolving relative message paths under ``root``."""

    errors = []
    for level, messages in findings:
        resolved = []
        for message in messages:
            entry = dict(message)
            path = entry.get("path")
            if isinstance(path, str) and path and not Path(path).is_absolute():
                entry["path"] = str(root / path)
            resolved.append(entry)
        errors.append({"level": level, "message": resolved})
    return json.dumps({"passed": not errors, "errors": errors})


@pytest.fixture
def flow_output() -> Callable[..., str]:
    """Return a builder for Flow JSON output."""
    return _flow_payload


def _install_fake_flow(root: Path, body: str) -> Path:
    """Write an executable shell script running ``body`` as the project's Flow binary."""

    bin_dir = root / "node_modules" / ".bin"
    bin_dir.mkdir(parents=True, exist_ok=True)
    flow = bin_dir / "flow"
    flow.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    flow.chmod(flow.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return flow


@pytest.fixture
def fake_flow() -> Callable[[Path, str], Path]:
    """Return an installer for shell-script Flow binaries."""
    return _install_fake_flow
