# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Single-flight coalescing of keyed invocations with a timeout.

One :class:`Coalescer` owns a table of in-flight slots. The first request for a
key launches the underlying work and arms a timer; later requests for the same
key share the slot's future until it settles. The invocation and the timer both
report through :meth:`Coalescer._settle`, which runs under the table lock, so
exactly one of them decides the outcome and the slot leaves the table in the
same step.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import CancelledError, Future
from dataclasses import dataclass
from functools import partial
from typing import Final, Generic, Protocol, TypeVar

from ..config import DEFAULT_TIMEOUT_MS
from ..errors import InvocationTimeoutError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_MS_PER_SECOND: Final[float] = 1000.0


class TimerHandle(Protocol):
    """Minimal timer interface used by the coalescer."""

    def start(self) -> None:
        """Arm the timer."""

    def cancel(self) -> None:
        """Disarm the timer if it has not fired yet."""


TimerFactory = Callable[[float, Callable[..., None], tuple[object, ...]], TimerHandle]
LaunchCallable = Callable[[str], Future[T]]


def daemon_timer(interval: float, function: Callable[..., None], args: tuple[object, ...]) -> TimerHandle:
    """Return a daemon :class:`threading.Timer` so abandoned timers never block exit."""

    timer = threading.Timer(interval, function, args=args)
    timer.daemon = True
    return timer


@dataclass(slots=True)
class InvocationSlot(Generic[T]):
    """Shared state of one in-flight invocation."""

    key: str
    timeout_ms: int
    result: Future[T]
    timer: TimerHandle | None = None
    settled: bool = False


class Coalescer(Generic[T]):
    """Share one in-flight invocation per key between all concurrent callers."""

    def __init__(
        self,
        launch: LaunchCallable[T],
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        timer_factory: TimerFactory = daemon_timer,
    ) -> None:
        """Initialise the coalescer.

        Args:
            launch: Callable starting the underlying work for a key and returning
                a future for its outcome.
            timeout_ms: Default timeout applied to each invocation.
            timer_factory: Factory creating timers as ``(seconds, function, args)``.

        Raises:
            ValueError: If ``timeout_ms`` is not positive.
        """

        self._launch = launch
        self._timeout_ms = _validate_timeout(timeout_ms)
        self._timer_factory = timer_factory
        self._slots: dict[str, InvocationSlot[T]] = {}
        self._lock = threading.Lock()

    @property
    def timeout_ms(self) -> int:
        """Return the default timeout applied to new invocations."""
        return self._timeout_ms

    def pending_keys(self) -> frozenset[str]:
        """Return the keys that currently have an unsettled invocation."""
        with self._lock:
            return frozenset(self._slots)

    def invoke(self, key: str, timeout_ms: int | None = None) -> Future[T]:
        """Return the shared outcome for ``key``, launching work when needed.

        Args:
            key: Coalescing key.
            timeout_ms: Timeout for a newly launched invocation. Ignored when the
                caller joins an invocation that is already in flight.

        Returns:
            Future[T]: Future shared by every caller attached to the same slot.
            It fails with :class:`InvocationTimeoutError` when the timer wins.
        """

        effective_timeout = self._timeout_ms if timeout_ms is None else _validate_timeout(timeout_ms)
        with self._lock:
            existing = self._slots.get(key)
            if existing is not None:
                LOGGER.debug("joining in-flight invocation for %s", key)
                return existing.result
            slot: InvocationSlot[T] = InvocationSlot(key=key, timeout_ms=effective_timeout, result=Future())
            slot.result.set_running_or_notify_cancel()
            self._slots[key] = slot

        LOGGER.debug("launching invocation for %s (timeout %dms)", key, effective_timeout)
        timer = self._timer_factory(effective_timeout / _MS_PER_SECOND, self._on_timeout, (slot,))
        slot.timer = timer
        timer.start()
        try:
            pending = self._launch(key)
        except Exception as exc:  # noqa: BLE001 - surfaced through the shared future
            self._settle(slot, error=exc)
            return slot.result
        pending.add_done_callback(partial(self._on_complete, slot))
        return slot.result

    def _on_timeout(self, slot: InvocationSlot[T]) -> None:
        self._settle(slot, error=InvocationTimeoutError(slot.key, slot.timeout_ms))

    def _on_complete(self, slot: InvocationSlot[T], pending: Future[T]) -> None:
        if pending.cancelled():
            self._settle(slot, error=CancelledError())
            return
        error = pending.exception()
        if error is not None:
            self._settle(slot, error=error)
        else:
            self._settle(slot, value=pending.result())

    def _settle(
        self,
        slot: InvocationSlot[T],
        *,
        value: T | None = None,
        error: BaseException | None = None,
    ) -> bool:
        """Resolve ``slot`` once and drop it from the table.

        Returns:
            bool: ``True`` when this call decided the outcome, ``False`` when the
            slot had already been settled by the other side of the race.
        """

        with self._lock:
            if slot.settled:
                LOGGER.debug("discarding late outcome for %s", slot.key)
                return False
            slot.settled = True
            if self._slots.get(slot.key) is slot:
                del self._slots[slot.key]
            timer = slot.timer

        if timer is not None:
            timer.cancel()
        if error is not None:
            LOGGER.debug("invocation for %s failed: %s", slot.key, error)
            slot.result.set_exception(error)
        else:
            slot.result.set_result(value)  # type: ignore[arg-type]
        return True


def _validate_timeout(timeout_ms: int) -> int:
    if timeout_ms <= 0:
        raise ValueError("timeout_ms must be positive")
    return timeout_ms


__all__ = ["Coalescer", "InvocationSlot", "TimerHandle", "daemon_timer"]
