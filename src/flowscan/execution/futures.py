# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Small combinators for :class:`concurrent.futures.Future` pipelines.

The helpers avoid nested closures; callbacks are bound with
:func:`functools.partial` so the forwarding logic stays at module level.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import CancelledError, Future
from functools import partial
from typing import TypeVar

SourceT = TypeVar("SourceT")
TargetT = TypeVar("TargetT")

Recover = Callable[[BaseException], TargetT]


def completed_future(value: TargetT) -> Future[TargetT]:
    """Return a future already resolved with ``value``."""

    future: Future[TargetT] = Future()
    future.set_result(value)
    return future


def _forward(
    target: Future[TargetT],
    transform: Callable[[SourceT], TargetT],
    recover: Recover[TargetT] | None,
    source: Future[SourceT],
) -> None:
    try:
        if source.cancelled():
            raise CancelledError()
        error = source.exception()
        if error is None:
            target.set_result(transform(source.result()))
        elif recover is None:
            target.set_exception(error)
        else:
            target.set_result(recover(error))
    except Exception as exc:  # noqa: BLE001 - delivered to the target future
        target.set_exception(exc)


def chain_future(
    source: Future[SourceT],
    transform: Callable[[SourceT], TargetT],
    *,
    recover: Recover[TargetT] | None = None,
) -> Future[TargetT]:
    """Return a future resolving to ``transform(source.result())``.

    Args:
        source: Upstream future.
        transform: Function applied to the upstream result on success.
        recover: Optional handler turning an upstream failure into a value; it
            may re-raise to keep the failure.

    Returns:
        Future[TargetT]: Downstream future. Exceptions raised by ``transform`` or
        ``recover`` are stored on it rather than escaping into the callback thread.
    """

    target: Future[TargetT] = Future()
    target.set_running_or_notify_cancel()
    source.add_done_callback(partial(_forward, target, transform, recover))
    return target


__all__ = ["chain_future", "completed_future"]
