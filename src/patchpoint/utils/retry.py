"""Bounded retry with exponential backoff for remote calls.

Wraps AI provider and GitHub calls. Errors are classified before every
retry: rate limiting, gateway errors and dropped or timed-out connections
are retried; everything else is raised on the spot without using up an
attempt. Each call gets its own attempt counter, and the policy object is
immutable so it can be shared freely.
"""

from __future__ import annotations

import errno
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import aiohttp
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from patchpoint.constants import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_DELAY,
    DEFAULT_MAX_RETRIES,
    RETRYABLE_NETWORK_CODES,
    RETRYABLE_STATUS_CODES,
)
from patchpoint.exceptions import FatalProviderError, RetryableTransportError
from patchpoint.logging import get_logger

__all__ = [
    "RetryPolicy",
    "classify_error",
    "is_retryable",
    "run_with_retry",
    "run_with_retry_sync",
]

logger = get_logger(__name__)

T = TypeVar("T")

_RETRYABLE_ERRNOS = frozenset({errno.ECONNRESET, errno.ETIMEDOUT})


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """How many times to retry and how long to back off.

    Attributes:
        max_retries: Retries after the first attempt.
        base_delay: Delay before the first retry, in seconds.
        max_delay: Cap on any single delay, in seconds.
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    max_delay: float = DEFAULT_MAX_DELAY

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Backoff before retry number ``attempt`` (0-based)."""
        return min(self.base_delay * 2**attempt, self.max_delay)


def _int_attr(obj: Any, *names: str) -> int | None:
    for name in names:
        value = getattr(obj, name, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _status_of(exc: BaseException) -> int | None:
    status = _int_attr(exc, "status_code", "status")
    if status is not None:
        return status
    response = getattr(exc, "response", None)
    if response is not None:
        return _int_attr(response, "status_code", "status")
    return None


def _network_code_of(exc: BaseException) -> str | None:
    if isinstance(exc, RetryableTransportError) and exc.network_code:
        return exc.network_code
    if isinstance(exc, (ConnectionResetError, aiohttp.ServerDisconnectedError)):
        return "ECONNRESET"
    if isinstance(exc, TimeoutError):
        return "ETIMEDOUT"
    if getattr(exc, "errno", None) in _RETRYABLE_ERRNOS:
        return errno.errorcode[exc.errno]  # type: ignore[attr-defined]
    code = getattr(exc, "code", None)
    if isinstance(code, str) and code in RETRYABLE_NETWORK_CODES:
        return code
    return None


def classify_error(exc: BaseException) -> tuple[str, bool]:
    """Classify an error for retry purposes.

    Returns:
        A tuple of (error_type, is_retryable) where error_type is one of
        "rate_limit", "server", "network", or "fatal".

    Examples:
        >>> classify_error(RetryableTransportError("busy", status_code=429))
        ('rate_limit', True)
        >>> classify_error(ValueError("bad input"))
        ('fatal', False)
    """
    if isinstance(exc, FatalProviderError):
        return ("fatal", False)

    status = _status_of(exc)
    if status is not None and status in RETRYABLE_STATUS_CODES:
        return ("rate_limit" if status == 429 else "server", True)

    if _network_code_of(exc) is not None:
        return ("network", True)

    if isinstance(exc, RetryableTransportError) and status is None:
        return ("network", True)

    return ("fatal", False)


def is_retryable(exc: BaseException) -> bool:
    return classify_error(exc)[1]


def _before_sleep(context: str) -> Callable[[RetryCallState], None]:
    def log_attempt(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        error_type = classify_error(exc)[0] if exc is not None else "unknown"
        logger.warning(
            "retrying_operation",
            context=context,
            attempt=retry_state.attempt_number,
            error_type=error_type,
            error=str(exc),
            delay=delay,
        )

    return log_attempt


def _retry_kwargs(policy: RetryPolicy, context: str) -> dict[str, Any]:
    return {
        "stop": stop_after_attempt(policy.max_attempts),
        "wait": wait_exponential(
            multiplier=policy.base_delay, min=0, max=policy.max_delay
        ),
        "retry": retry_if_exception(is_retryable),
        "before_sleep": _before_sleep(context),
        "reraise": True,
    }


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    context: str = "operation",
    sleep: Callable[[float], Awaitable[None]] | None = None,
) -> T:
    """Await ``operation()`` until it succeeds or retries run out.

    Non-retryable errors propagate immediately. After the final failed
    attempt the last error is re-raised unchanged.

    Args:
        operation: Zero-argument coroutine function to call.
        policy: Retry policy; defaults to 3 retries, 1s base, 10s cap.
        context: Label used in log lines.
        sleep: Async sleep function; defaults to tenacity's asyncio sleep.

    Returns:
        Whatever ``operation`` returns.

    Example:
        ```python
        response = await run_with_retry(
            lambda: provider.send_message(messages),
            RetryPolicy(max_retries=2),
            context="security/group-1",
        )
        ```
    """
    policy = policy or RetryPolicy()
    kwargs = _retry_kwargs(policy, context)
    if sleep is not None:
        kwargs["sleep"] = sleep

    async for attempt in AsyncRetrying(**kwargs):
        with attempt:
            return await operation()
    raise AssertionError("unreachable")  # pragma: no cover


def run_with_retry_sync(
    operation: Callable[[], T],
    policy: RetryPolicy | None = None,
    *,
    context: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Blocking counterpart of :func:`run_with_retry`."""
    policy = policy or RetryPolicy()
    for attempt in Retrying(sleep=sleep, **_retry_kwargs(policy, context)):
        with attempt:
            return operation()
    raise AssertionError("unreachable")  # pragma: no cover
