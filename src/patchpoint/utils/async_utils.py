"""Async utilities for structured concurrency using anyio.

Shared primitives for running AI and GitHub calls in parallel with
bounded fan-out and ordered results.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import anyio

from patchpoint.constants import DEFAULT_BATCH_SIZE, DEFAULT_INTER_BATCH_DELAY
from patchpoint.logging import get_logger

__all__ = [
    "ParallelExecutionError",
    "run_parallel",
    "run_in_batches",
]

logger = get_logger(__name__)

T = TypeVar("T")


class ParallelExecutionError(Exception):
    """One or more parallel tasks failed.

    Attributes:
        exceptions: Exceptions from the failed tasks, in task order.
        results: Results and exceptions in task order.
    """

    def __init__(
        self,
        message: str,
        exceptions: tuple[BaseException, ...],
        results: tuple[Any | BaseException, ...],
    ) -> None:
        super().__init__(message)
        self.exceptions = exceptions
        self.results = results


async def _gather_into(
    slots: list[Any],
    tasks: list[tuple[int, Callable[[], Awaitable[T]]]],
) -> None:
    """Run ``tasks`` concurrently, writing each outcome into its reserved slot."""

    async def run_task(index: int, task_fn: Callable[[], Awaitable[T]]) -> None:
        try:
            slots[index] = await task_fn()
        except Exception as exc:
            slots[index] = exc

    async with anyio.create_task_group() as tg:
        for index, task_fn in tasks:
            tg.start_soon(run_task, index, task_fn)


def _finish(slots: list[Any], return_exceptions: bool) -> list[Any]:
    failed = tuple(r for r in slots if isinstance(r, Exception))
    if failed and not return_exceptions:
        raise ParallelExecutionError(
            f"{len(failed)} task(s) failed during parallel execution",
            exceptions=failed,
            results=tuple(slots),
        )
    return slots


async def run_parallel(
    tasks: list[Callable[[], Awaitable[T]]],
    *,
    return_exceptions: bool = False,
) -> list[T | Exception]:
    """Run all tasks at once and return their results in input order.

    Args:
        tasks: Zero-argument coroutine functions.
        return_exceptions: Put failures in the result list instead of raising.

    Raises:
        ParallelExecutionError: If any task fails and return_exceptions=False.
    """
    if not tasks:
        return []
    slots: list[Any] = [None] * len(tasks)
    await _gather_into(slots, list(enumerate(tasks)))
    return _finish(slots, return_exceptions)


async def run_in_batches(
    tasks: list[Callable[[], Awaitable[T]]],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    inter_batch_delay: float = DEFAULT_INTER_BATCH_DELAY,
    return_exceptions: bool = False,
    sleep: Callable[[float], Awaitable[None]] | None = None,
) -> list[T | Exception]:
    """Run tasks in consecutive batches of at most ``batch_size``.

    Each batch runs concurrently and completes before the next starts; the
    pause between batches keeps bursts under provider rate limits. A failed
    task never cancels its siblings; its slot holds the exception.

    Args:
        tasks: Zero-argument coroutine functions.
        batch_size: Maximum tasks in flight at once.
        inter_batch_delay: Seconds to wait between batches.
        return_exceptions: Put failures in the result list instead of raising
            once all batches have run.
        sleep: Async sleep used for the pause; anyio.sleep by default.

    Returns:
        Results in the same order as ``tasks``.

    Raises:
        ParallelExecutionError: If any task fails and return_exceptions=False.
        ValueError: If batch_size is less than 1.

    Example:
        ```python
        results = await run_in_batches(
            [lambda g=g: review_group(g) for g in groups],
            batch_size=3,
            return_exceptions=True,
        )
        ```
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    if not tasks:
        return []

    slots: list[Any] = [None] * len(tasks)
    indexed = list(enumerate(tasks))
    batches = [indexed[i : i + batch_size] for i in range(0, len(indexed), batch_size)]

    for number, batch in enumerate(batches, start=1):
        logger.debug("batch_started", batch=number, of=len(batches), size=len(batch))
        await _gather_into(slots, batch)
        if number < len(batches) and inter_batch_delay > 0:
            await (sleep or anyio.sleep)(inter_batch_delay)

    return _finish(slots, return_exceptions)
