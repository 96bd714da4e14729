r"""Asynchronous retry-driven lock acquisition.

This module provides ``AsyncLocker``, the asyncio counterpart of
``Locker``. Acquire and release functions are coroutines and the waits
between attempts only suspend the calling task.
"""

from __future__ import annotations

__all__ = ["AsyncAcquireFunc", "AsyncLocker", "AsyncReleaseFunc"]

import logging
import time
from collections.abc import Awaitable, Callable
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
from alocker.lock import AsyncLock
from alocker.utils.structured_logging import lock_key_scope

if TYPE_CHECKING:
    from alocker.delay.base import BaseDelay
    from alocker.lock import LockOption

logger: logging.Logger = logging.getLogger(__name__)

AsyncAcquireFunc = Callable[[Context, Any], Awaitable[Any]]
AsyncReleaseFunc = Callable[[Context, Any], Awaitable[Any]]


class AsyncLocker:
    r"""Acquire locks through caller-supplied coroutines, with retries.

    Behaves like ``Locker``: at most ``max_attempts`` calls to the acquire
    function, a wait from the delay strategy after each
    ``AlreadyLockedError``, and immediate failure on any other error.
    Cancelling the task running ``acquire`` raises
    ``asyncio.CancelledError`` as usual; cancelling the context raises
    ``LockCancelledError``.

    Args:
        acquire_func: Coroutine function called with ``(ctx, key)`` to
            take the lock. It must raise ``AlreadyLockedError`` when the
            resource is currently held.
        release_func: Coroutine function called with ``(ctx, key)`` to
            release the lock.
        config: Optional LockerConfig. If ``None``, a default LockerConfig
            is used.

    Example:
        ```pycon
        >>> import asyncio
        >>> from alocker import AlreadyLockedError, AsyncLocker
        >>> held = set()
        >>> async def acquire(ctx, key):
        ...     if key in held:
        ...         raise AlreadyLockedError(key=key)
        ...     held.add(key)
        ...
        >>> async def release(ctx, key):
        ...     held.discard(key)
        ...
        >>> async def main():
        ...     locker = AsyncLocker(acquire, release)
        ...     async with await locker.acquire("invoice-42"):
        ...         return "invoice-42" in held
        ...
        >>> asyncio.run(main())
        True

        ```
    """

    def __init__(
        self,
        acquire_func: AsyncAcquireFunc,
        release_func: AsyncReleaseFunc,
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

    async def acquire(
        self, key: Any, *options: LockOption, ctx: Context | None = None
    ) -> AsyncLock:
        """Acquire the lock for ``key``, retrying while it is already
        locked.

        Args:
            key: Opaque identifier of the resource to lock.
            *options: Lock options applied in order to the handle after a
                successful acquisition.
            ctx: Optional context passed to the acquire function and used
                to cancel the retry loop.

        Returns:
            The lock handle bound to ``key``.

        Raises:
            AcquireError: If the acquire function raised anything other
                than ``AlreadyLockedError``.
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
                    await self._acquire_func(ctx, key)
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
                if await ctx.wait_async(wait_time):
                    check_cancelled(ctx, key, attempt + 1, config, start_time)
                attempt += 1

            raise_max_attempts(key, config, start_time, last_error)

    def _create_lock(
        self,
        key: Any,
        options: tuple[LockOption, ...],
        attempt: int,
        start_time: float,
    ) -> AsyncLock:
        lock = AsyncLock(key, self._release_func)
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
