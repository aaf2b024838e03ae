# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Background execution of external commands with buffered stdout capture."""

from __future__ import annotations

import logging

# Bandit: subprocess usage is intentional; commands are argument lists built from
# the project layout and never routed through a shell.
import subprocess  # nosec B404 suppression_valid: Shell-free subprocess wrapper.
import threading
from collections.abc import Sequence
from concurrent.futures import Future
from pathlib import Path
from types import TracebackType
from typing import Final, Protocol, runtime_checkable

from ..errors import SpawnError

LOGGER = logging.getLogger(__name__)

_READ_CHUNK_SIZE: Final[int] = 64 * 1024
_THREAD_NAME_PREFIX: Final[str] = "flowscan-reader"


@runtime_checkable
class CommandStarter(Protocol):
    """Protocol for objects that launch commands and report through futures."""

    def start(self, executable: str | Path, args: Sequence[str], *, cwd: Path) -> Future[str]:
        """Launch ``executable`` with ``args`` inside ``cwd``.

        Args:
            executable: Program to execute.
            args: Arguments passed after the executable.
            cwd: Working directory of the child process.

        Returns:
            Future[str]: Future resolving to the captured stdout text, or failing
            with :class:`SpawnError` when the process cannot be started.
        """

        raise NotImplementedError


def spawn(command: Sequence[str], *, cwd: Path) -> subprocess.Popen[bytes]:
    """Start ``command`` with stdout piped and stdin/stderr discarded.

    Raises:
        SpawnError: If the operating system refuses to start the process.
    """

    try:
        # Bandit: argument list comes from project configuration; shell is disabled.
        return subprocess.Popen(  # nosec B603 - controlled arguments, not user supplied
            list(command),
            cwd=str(cwd),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
    except OSError as exc:
        LOGGER.error("spawn-error: unable to start %s", command[0], exc_info=exc)
        raise SpawnError(command, exc) from exc


def drain(process: subprocess.Popen[bytes]) -> str:
    """Read ``process`` stdout chunk by chunk until EOF and wait for it to exit.

    The exit status is not inspected because analysers commonly exit non-zero
    when they report findings.

    Returns:
        str: Concatenated stdout decoded as UTF-8.
    """

    chunks: list[bytes] = []
    with process:
        stream = process.stdout
        if stream is not None:
            while chunk := stream.read1(_READ_CHUNK_SIZE):
                chunks.append(chunk)
        returncode = process.wait()
    LOGGER.debug("pid %s exited with status %s (%d chunks)", process.pid, returncode, len(chunks))
    return b"".join(chunks).decode("utf-8", errors="replace")


def run_buffered(command: Sequence[str], *, cwd: Path) -> str:
    """Run ``command`` to completion and return everything it wrote to stdout.

    Raises:
        SpawnError: If the operating system refuses to start the process.
    """

    return drain(spawn(command, cwd=cwd))


def _deliver(future: Future[str], process: subprocess.Popen[bytes]) -> None:
    try:
        output = drain(process)
    except OSError as exc:
        LOGGER.error("read-error: lost output of pid %s", process.pid, exc_info=exc)
        future.set_exception(exc)
        return
    future.set_result(output)


class CommandRunner(CommandStarter):
    """Spawn each command immediately and drain it on its own daemon thread.

    Commands are never queued: a process that outlives its caller's interest
    holds only its own reader thread, and daemon readers never keep the
    interpreter alive at exit.
    """

    def __init__(self) -> None:
        self._readers: set[threading.Thread] = set()
        self._lock = threading.Lock()

    def start(self, executable: str | Path, args: Sequence[str], *, cwd: Path) -> Future[str]:
        command = [str(executable), *args]
        future: Future[str] = Future()
        future.set_running_or_notify_cancel()
        LOGGER.debug("starting %s in %s", " ".join(command), cwd)
        try:
            process = spawn(command, cwd=cwd)
        except SpawnError as exc:
            future.set_exception(exc)
            return future
        reader = threading.Thread(
            target=self._read,
            args=(future, process),
            name=f"{_THREAD_NAME_PREFIX}-{process.pid}",
            daemon=True,
        )
        with self._lock:
            self._readers.add(reader)
        reader.start()
        return future

    def _read(self, future: Future[str], process: subprocess.Popen[bytes]) -> None:
        try:
            _deliver(future, process)
        finally:
            with self._lock:
                self._readers.discard(threading.current_thread())

    def active_count(self) -> int:
        """Return the number of commands whose output is still being read."""

        with self._lock:
            return len(self._readers)

    def shutdown(self, *, wait: bool = True) -> None:
        """Optionally wait for every running command to finish.

        Without ``wait`` running commands are abandoned; their reader threads are
        daemons and do not delay interpreter exit.
        """

        if not wait:
            return
        with self._lock:
            readers = list(self._readers)
        for reader in readers:
            reader.join()

    def __enter__(self) -> CommandRunner:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.shutdown()


__all__ = ["CommandRunner", "CommandStarter", "drain", "run_buffered", "spawn"]
