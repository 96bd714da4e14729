r"""Shared test helpers: in-memory acquire/release collaborators.

These stand in for the real lock backends that applications plug into
lockers (database rows, lock services, files).
"""

from __future__ import annotations

import threading
from typing import Any

from alocker import AlreadyLockedError, Context
from alocker.delay import BaseDelay


class InMemoryLockTable:
    """Thread-safe set of held keys exposing acquire/release functions.

    Attributes:
        acquire_calls: Keys passed to ``acquire``, in call order.
        release_calls: Keys passed to ``release``, in call order.
    """

    def __init__(self) -> None:
        self._held: set[Any] = set()
        self._lock = threading.Lock()
        self.acquire_calls: list[Any] = []
        self.release_calls: list[Any] = []

    def acquire(self, ctx: Context, key: Any) -> None:
        with self._lock:
            self.acquire_calls.append(key)
            if key in self._held:
                raise AlreadyLockedError(key=key)
            self._held.add(key)

    def release(self, ctx: Context, key: Any) -> None:
        with self._lock:
            self.release_calls.append(key)
            self._held.discard(key)

    async def acquire_async(self, ctx: Context, key: Any) -> None:
        self.acquire(ctx, key)

    async def release_async(self, ctx: Context, key: Any) -> None:
        self.release(ctx, key)

    def is_held(self, key: Any) -> bool:
        with self._lock:
            return key in self._held


class CountingDelay(BaseDelay):
    """Delay strategy returning a fixed value and counting calls."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.calls = 0

    def next(self) -> float:
        self.calls += 1
        return self.delay
