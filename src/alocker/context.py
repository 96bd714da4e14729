r"""Cancellation-capable execution context.

A ``Context`` is handed to every acquire and release function and bounds
the waits between acquisition attempts. Cancelling it, or reaching its
deadline, interrupts any pending wait and stops further retries.

Example:
    ```pycon
    >>> from alocker.context import Context
    >>> ctx = Context(timeout=30.0)
    >>> ctx.cancelled
    False
    >>> ctx.cancel()
    >>> ctx.cancelled
    True
    >>> ctx.reason
    'cancelled'

    ```
"""

from __future__ import annotations

__all__ = ["DEADLINE_EXCEEDED", "MAX_WAIT_SLICE", "Context"]

import asyncio
import logging
import threading
import time
from typing import TYPE_CHECKING, Any

from alocker.exceptions import LockCancelledError

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)

DEADLINE_EXCEEDED = "deadline exceeded"

# Longest single blocking call used by Context.wait, in seconds
MAX_WAIT_SLICE = 3600.0


class Context:
    """Cancellation token with an optional deadline.

    Thread-safe: ``cancel`` may be called from any thread while another
    thread is blocked in ``wait``.

    Args:
        timeout: Optional number of seconds after which the context is
            considered cancelled with reason ``"deadline exceeded"``.
            Must be >= 0 if provided.

    Raises:
        ValueError: If ``timeout`` is negative.
    """

    def __init__(self, timeout: float | None = None) -> None:
        if timeout is not None and timeout < 0:
            msg = f"timeout must be >= 0, got {timeout}"
            raise ValueError(msg)
        self.deadline: float | None = (
            time.monotonic() + timeout if timeout is not None else None
        )
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: str | None = None
        self._callbacks: list[Callable[[], Any]] = []

    @property
    def cancelled(self) -> bool:
        """Whether the context was cancelled or its deadline has passed."""
        if self._event.is_set():
            return True
        if self.deadline is not None and time.monotonic() >= self.deadline:
            self.cancel(DEADLINE_EXCEEDED)
            return True
        return False

    @property
    def reason(self) -> str | None:
        """The cancellation reason, or ``None`` while the context is live."""
        if not self.cancelled:
            return None
        return self._reason

    def remaining(self) -> float | None:
        """Return the seconds left before the deadline.

        Returns:
            The remaining time (never negative), or ``None`` when the
            context has no deadline.
        """
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def cancel(self, reason: str = "cancelled") -> None:
        """Cancel the context and wake up every waiter.

        Cancelling an already cancelled context is a no-op; the first
        reason is kept.

        Args:
            reason: A short description of why the context was cancelled.
        """
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        logger.debug(f"Context cancelled ({reason})")
        for callback in callbacks:
            callback()

    def wait(self, seconds: float) -> bool:
        """Block the calling thread for ``seconds`` or until cancellation.

        The wait is also cut short by the deadline.

        Args:
            seconds: The number of seconds to wait. Negative values are
                treated as 0 and ``math.inf`` waits until cancellation.

        Returns:
            ``True`` if the context was cancelled (or its deadline passed)
            during or before the wait, ``False`` if the full wait elapsed.
        """
        seconds = max(0.0, seconds)
        remaining = self.remaining()
        if remaining is not None and remaining <= seconds:
            if not self._wait_event(remaining):
                self.cancel(DEADLINE_EXCEEDED)
            return True
        return self._wait_event(seconds)

    def _wait_event(self, seconds: float) -> bool:
        # Event.wait overflows on huge timeouts, so wait in bounded slices
        end = time.monotonic() + seconds
        while not self._event.wait(min(seconds, MAX_WAIT_SLICE)):
            seconds = end - time.monotonic()
            if seconds <= 0:
                return False
        return True

    async def wait_async(self, seconds: float) -> bool:
        """Asynchronous version of ``wait``.

        Only the calling task is suspended. ``cancel`` may be called from
        another task or another thread.

        Args:
            seconds: The number of seconds to wait. Negative values are
                treated as 0 and ``math.inf`` waits until cancellation.

        Returns:
            ``True`` if the context was cancelled (or its deadline passed)
            during or before the wait, ``False`` if the full wait elapsed.
        """
        if self.cancelled:
            return True
        seconds = max(0.0, seconds)
        remaining = self.remaining()
        bounded_by_deadline = remaining is not None and remaining <= seconds
        timeout = remaining if bounded_by_deadline else seconds

        loop = asyncio.get_running_loop()
        event = asyncio.Event()

        def wake() -> None:
            loop.call_soon_threadsafe(event.set)

        self.add_cancel_callback(wake)
        try:
            await asyncio.wait_for(event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            if bounded_by_deadline:
                self.cancel(DEADLINE_EXCEEDED)
        finally:
            self.remove_cancel_callback(wake)
        return self.cancelled

    def check(self, key: Any = None) -> None:
        """Raise if the context is cancelled.

        Args:
            key: Optional lock key added to the error for diagnostics.

        Raises:
            LockCancelledError: If the context is cancelled or its deadline
                has passed.
        """
        if self.cancelled:
            raise LockCancelledError(key=key, reason=self._reason or "cancelled")

    def add_cancel_callback(self, callback: Callable[[], Any]) -> None:
        """Register a callable invoked once when the context is cancelled.

        The callback runs in the thread that calls ``cancel``. If the
        context is already cancelled, the callback runs immediately.
        Deadline expiry does not fire callbacks by itself; waiters must
        bound their wait with ``remaining()``.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_cancel_callback(self, callback: Callable[[], Any]) -> None:
        """Unregister a callback added with ``add_cancel_callback``."""
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def __repr__(self) -> str:
        state = f"cancelled={self._reason!r}" if self._event.is_set() else "active"
        return f"{self.__class__.__qualname__}({state}, deadline={self.deadline})"
