r"""Callback types and data structures for observability.

This module lets users hook into the acquisition lifecycle for logging,
metrics and alerting. Four hooks are available:

- on_attempt: Called before each call to the acquire function
- on_retry: Called when the resource is already locked, before waiting
- on_success: Called when the lock is acquired
- on_failure: Called when acquisition fails for good

Attempt numbers passed to callbacks are 1-indexed.

Example:
    ```pycon
    >>> from alocker import Locker, LockerConfig
    >>> from alocker.callbacks import RetryInfo
    >>> def log_retry(info: RetryInfo) -> None:
    ...     print(f"{info.key} is locked, waiting {info.wait_time}s")
    ...
    >>> locker = Locker(
    ...     acquire_func, release_func, config=LockerConfig(on_retry=log_retry)
    ... )  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "AttemptInfo",
    "FailureInfo",
    "RetryInfo",
    "SuccessInfo",
    "invoke_on_attempt",
    "invoke_on_failure",
    "invoke_on_retry",
    "invoke_on_success",
]

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass
class AttemptInfo:
    """Information passed to on_attempt callback.

    Attributes:
        key: The key being locked.
        attempt: The current attempt number (1-indexed).
        max_attempts: Maximum number of attempts configured.
    """

    key: Any
    attempt: int
    max_attempts: int


@dataclass
class RetryInfo:
    """Information passed to on_retry callback.

    Attributes:
        key: The key being locked.
        attempt: The attempt that found the resource locked (1-indexed).
        max_attempts: Maximum number of attempts configured.
        wait_time: The delay in seconds before the next attempt.
        error: The already-locked error raised by the acquire function.
    """

    key: Any
    attempt: int
    max_attempts: int
    wait_time: float
    error: Exception


@dataclass
class SuccessInfo:
    """Information passed to on_success callback.

    Attributes:
        key: The key that was locked.
        attempt: The attempt that succeeded (1-indexed).
        max_attempts: Maximum number of attempts configured.
        total_time: Time spent in ``acquire`` including waits (seconds).
    """

    key: Any
    attempt: int
    max_attempts: int
    total_time: float


@dataclass
class FailureInfo:
    """Information passed to on_failure callback.

    Attributes:
        key: The key that could not be locked.
        attempt: The number of attempts made.
        max_attempts: Maximum number of attempts configured.
        error: The error about to be raised to the caller.
        total_time: Time spent in ``acquire`` including waits (seconds).
    """

    key: Any
    attempt: int
    max_attempts: int
    error: Exception
    total_time: float


def invoke_on_attempt(
    on_attempt: Callable[[AttemptInfo], None] | None,
    *,
    key: Any,
    attempt: int,
    max_attempts: int,
) -> None:
    """Invoke on_attempt callback if provided.

    Args:
        on_attempt: Optional callback to invoke before each attempt.
        key: The key being locked.
        attempt: The current attempt number (0-indexed internally). The
            callback receives this as a 1-indexed value (attempt + 1).
        max_attempts: Maximum number of attempts.
    """
    if on_attempt is not None:
        on_attempt(AttemptInfo(key=key, attempt=attempt + 1, max_attempts=max_attempts))


def invoke_on_retry(
    on_retry: Callable[[RetryInfo], None] | None,
    *,
    key: Any,
    attempt: int,
    max_attempts: int,
    wait_time: float,
    error: Exception,
) -> None:
    """Invoke on_retry callback if provided.

    Args:
        on_retry: Optional callback to invoke before waiting.
        key: The key being locked.
        attempt: The attempt that found the resource locked (0-indexed
            internally, passed 1-indexed to the callback).
        max_attempts: Maximum number of attempts.
        wait_time: The delay in seconds before the next attempt.
        error: The already-locked error.
    """
    if on_retry is not None:
        on_retry(
            RetryInfo(
                key=key,
                attempt=attempt + 1,
                max_attempts=max_attempts,
                wait_time=wait_time,
                error=error,
            )
        )


def invoke_on_success(
    on_success: Callable[[SuccessInfo], None] | None,
    *,
    key: Any,
    attempt: int,
    max_attempts: int,
    start_time: float,
) -> None:
    """Invoke on_success callback if provided.

    Args:
        on_success: Optional callback to invoke when the lock is acquired.
        key: The key that was locked.
        attempt: The attempt that succeeded (0-indexed internally).
        max_attempts: Maximum number of attempts.
        start_time: The ``time.monotonic()`` value when acquisition started.
    """
    if on_success is not None:
        on_success(
            SuccessInfo(
                key=key,
                attempt=attempt + 1,
                max_attempts=max_attempts,
                total_time=time.monotonic() - start_time,
            )
        )


def invoke_on_failure(
    on_failure: Callable[[FailureInfo], None] | None,
    *,
    key: Any,
    attempts: int,
    max_attempts: int,
    error: Exception,
    start_time: float,
) -> None:
    """Invoke on_failure callback if provided.

    Args:
        on_failure: Optional callback to invoke before the error is raised.
        key: The key that could not be locked.
        attempts: The number of attempts made.
        max_attempts: Maximum number of attempts.
        error: The error about to be raised.
        start_time: The ``time.monotonic()`` value when acquisition started.
    """
    if on_failure is not None:
        on_failure(
            FailureInfo(
                key=key,
                attempt=attempts,
                max_attempts=max_attempts,
                error=error,
                total_time=time.monotonic() - start_time,
            )
        )
