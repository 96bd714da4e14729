r"""Shared attempt bookkeeping for sync and async lockers.

These helpers hold the parts of the acquisition loop that do not depend
on whether the loop blocks or awaits: error classification, building the
terminal errors and reporting them to callbacks.
"""

from __future__ import annotations

__all__ = [
    "check_cancelled",
    "is_already_locked",
    "raise_acquire_error",
    "raise_max_attempts",
]

import logging
from typing import TYPE_CHECKING, Any, NoReturn

from alocker.callbacks import invoke_on_failure
from alocker.exceptions import (
    AcquireError,
    AlreadyLockedError,
    LockCancelledError,
    MaxAttemptsReachedError,
)

if TYPE_CHECKING:
    from alocker.context import Context
    from alocker.core.config import LockerConfig

logger: logging.Logger = logging.getLogger(__name__)


def is_already_locked(exc: BaseException) -> bool:
    """Return whether an acquire error is the retryable already-locked
    condition.

    Example:
        ```pycon
        >>> from alocker.core.attempts import is_already_locked
        >>> from alocker.exceptions import AlreadyLockedError
        >>> is_already_locked(AlreadyLockedError())
        True
        >>> is_already_locked(OSError("disk full"))
        False

        ```
    """
    return isinstance(exc, AlreadyLockedError)


def raise_acquire_error(
    exc: Exception,
    key: Any,
    attempt: int,
    config: LockerConfig,
    start_time: float,
) -> NoReturn:
    """Wrap a fatal acquire error with the key and raise it.

    Args:
        exc: The exception raised by the acquire function.
        key: The key being locked.
        attempt: The current attempt number (0-indexed).
        config: The locker configuration.
        start_time: The ``time.monotonic()`` value when acquisition started.

    Raises:
        AcquireError: Always, chained from ``exc``.
    """
    logger.debug(
        f"Acquiring {key!r} failed with {type(exc).__name__} on attempt "
        f"{attempt + 1}/{config.max_attempts}: {exc}"
    )
    error = AcquireError(key, exc)
    invoke_on_failure(
        config.on_failure,
        key=key,
        attempts=attempt + 1,
        max_attempts=config.max_attempts,
        error=error,
        start_time=start_time,
    )
    raise error from exc


def raise_max_attempts(
    key: Any,
    config: LockerConfig,
    start_time: float,
    last_error: Exception | None,
) -> NoReturn:
    """Raise the terminal error when the attempt budget is exhausted.

    Args:
        key: The key being locked.
        config: The locker configuration.
        start_time: The ``time.monotonic()`` value when acquisition started.
        last_error: The last already-locked error, chained as the cause.

    Raises:
        MaxAttemptsReachedError: Always.
    """
    logger.debug(f"Giving up on {key!r} after {config.max_attempts} attempts")
    error = MaxAttemptsReachedError(key, config.max_attempts)
    invoke_on_failure(
        config.on_failure,
        key=key,
        attempts=config.max_attempts,
        max_attempts=config.max_attempts,
        error=error,
        start_time=start_time,
    )
    raise error from last_error


def check_cancelled(
    ctx: Context,
    key: Any,
    attempts: int,
    config: LockerConfig,
    start_time: float,
) -> None:
    """Stop the acquisition if the context is cancelled.

    Args:
        ctx: The acquisition context.
        key: The key being locked.
        attempts: The number of attempts made so far.
        config: The locker configuration.
        start_time: The ``time.monotonic()`` value when acquisition started.

    Raises:
        LockCancelledError: If the context is cancelled or its deadline
            has passed.
    """
    try:
        ctx.check(key)
    except LockCancelledError as exc:
        logger.debug(f"Acquiring {key!r} stopped after {attempts} attempts ({exc.reason})")
        invoke_on_failure(
            config.on_failure,
            key=key,
            attempts=attempts,
            max_attempts=config.max_attempts,
            error=exc,
            start_time=start_time,
        )
        raise
