r"""Synchronous retry-driven lock acquisition.

This module provides ``Locker``, which wraps a pair of acquire/release
functions with a retry loop: while the acquire function reports that the
resource is already locked, the locker waits according to its delay
strategy and tries again, up to a maximum number of attempts.
"""

from __future__ import annotations

__all__ = ["AcquireFunc", "Locker", "ReleaseFunc"]

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from alocker.callbacks import invoke_on_attempt, invoke_on_retry, invoke_on_success
from alocker.context import Context
from alocker.core.attempts import (
    check_cancelled,
    is_already_locked,
    raise_acquire_error,
    raise_max_attempts,
)
from alocker.core.config import LockerConfig
from alocker.lock import Lock
from alocker.utils.structured_logging import lock_key_scope

if TYPE_CHECKING:
    from alocker.delay.base import BaseDelay
    from alocker.lock import LockOption

logger: logging.Logger = logging.getLogger(__name__)

# Raises AlreadyLockedError when the resource is held by someone else
AcquireFunc = Callable[[Context, Any], Any]
ReleaseFunc = Callable[[Context, Any], Any]


class Locker:
    r"""Acquire locks through caller-supplied functions, with retries.

    The locker holds no lock state. Tracking keys and providing mutual
    exclusion is the job of the acquire and release functions. The locker
    is read-only after construction, so concurrent ``acquire`` calls from
    several threads are safe as long as the acquire/release functions are.
    Each call asks the delay strategy for the waits of its own retries,
    starting from the first.

    Args:
        acquire_func: Function called with ``(ctx, key)`` to take the
            lock. It must raise ``AlreadyLockedError`` when the resource
            is currently held; any other exception is fatal.
        release_func: Function called with ``(ctx, key)`` to release the
            lock.
        config: Optional LockerConfig. If ``None``, a default LockerConfig
            is used (5ms fixed delay, 6 attempts).

    Example:
        ```pycon
        >>> from alocker import AlreadyLockedError, Locker
        >>> held = set()
        >>> def acquire(ctx, key):
        ...     if key in held:
        ...         raise AlreadyLockedError(key=key)
        ...     held.add(key)
        ...
        >>> def release(ctx, key):
        ...     held.discard(key)
        ...
        >>> locker = Locker(acquire, release)
        >>> with locker.acquire("invoice-42") as lock:
        ...     "invoice-42" in held
        ...
        True
        >>> held
        set()

        ```
    """

    def __init__(
        self,
        acquire_func: AcquireFunc,
        release_func: ReleaseFunc,
        *,
        config: LockerConfig | None = None,
    ) -> None:
        self._config: LockerConfig = config or LockerConfig()
        self._acquire_func = acquire_func
        self._release_func = release_func
        self._delay: BaseDelay = self._config.create_delay()

    @property
    def config(self) -> LockerConfig:
        """The locker configuration."""
        return self._config

    @property
    def delay(self) -> BaseDelay:
        """The delay strategy used between attempts."""
        return self._delay

    @property
    def max_attempts(self) -> int:
        """The maximum number of acquisition attempts."""
        return self._config.max_attempts

    def acquire(self, key: Any, *options: LockOption, ctx: Context | None = None) -> Lock:
        """Acquire the lock for ``key``, retrying while it is already
        locked.

        The acquire function is called at most ``max_attempts`` times.
        Each ``AlreadyLockedError`` is followed by a wait whose duration
        comes from the delay strategy, given the retry number of this
        call. Negative durations are treated as 0. The wait is interrupted
        when the context is cancelled or reaches its deadline.

        Args:
            key: Opaque identifier of the resource to lock, passed as-is
                to the acquire and release functions.
            *options: Lock options applied in order to the handle after a
                successful acquisition.
            ctx: Optional context passed to the acquire function and used
                to cancel the retry loop. A fresh context is used if
                omitted.

        Returns:
            The lock handle bound to ``key``.

        Raises:
            AcquireError: If the acquire function raised anything other
                than ``AlreadyLockedError``. Not retried.
            MaxAttemptsReachedError: If every attempt found the resource
                already locked.
            LockCancelledError: If the context was cancelled before the
                lock could be acquired.
        """
        ctx = ctx if ctx is not None else Context()
        config = self._config
        start_time = time.monotonic()
        last_error: Exception | None = None

        with lock_key_scope(key):
            attempt = 0
            while attempt < config.max_attempts:
                check_cancelled(ctx, key, attempt, config, start_time)

                invoke_on_attempt(
                    config.on_attempt, key=key, attempt=attempt, max_attempts=config.max_attempts
                )
                try:
                    self._acquire_func(ctx, key)
                except Exception as exc:
                    if not is_already_locked(exc):
                        raise_acquire_error(exc, key, attempt, config, start_time)
                    last_error = exc
                else:
                    return self._create_lock(key, options, attempt, start_time)

                wait_time = max(0.0, self._delay.for_attempt(attempt))
                logger.debug(
                    f"{key!r} is already locked (attempt {attempt + 1}/{config.max_attempts}), "
                    f"waiting {wait_time:.3f}s"
                )
                invoke_on_retry(
                    config.on_retry,
                    key=key,
                    attempt=attempt,
                    max_attempts=config.max_attempts,
                    wait_time=wait_time,
                    error=last_error,
                )
                if ctx.wait(wait_time):
                    check_cancelled(ctx, key, attempt + 1, config, start_time)
                attempt += 1

            raise_max_attempts(key, config, start_time, last_error)

    def _create_lock(
        self,
        key: Any,
        options: tuple[LockOption, ...],
        attempt: int,
        start_time: float,
    ) -> Lock:
        lock = Lock(key, self._release_func)
        for option in options:
            option(lock)
        logger.debug(f"Acquired lock for {key!r} on attempt {attempt + 1}")
        invoke_on_success(
            self._config.on_success,
            key=key,
            attempt=attempt,
            max_attempts=self._config.max_attempts,
            start_time=start_time,
        )
        return lock

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(delay={self._delay!r}, "
            f"max_attempts={self._config.max_attempts})"
        )
