r"""Lock handles returned by successful acquisitions.

A handle carries the locked key and the ability to release it. It owns
no resource itself: releasing delegates to the release function given to
the locker, which also decides what a second release means.
"""

from __future__ import annotations

__all__ = ["AsyncLock", "Lock", "LockOption", "with_metadata"]

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from alocker.context import Context

if TYPE_CHECKING:
    from collections.abc import Awaitable
    from types import TracebackType
    from typing import Self


class Lock:
    """Handle for a lock acquired by ``Locker``.

    Args:
        key: The key that was locked.
        release_func: The function called with ``(ctx, key)`` to release
            the lock.

    Attributes:
        key: The locked key.
        metadata: Free-form data attached by lock options.

    Example:
        ```pycon
        >>> from alocker.lock import Lock
        >>> released = []
        >>> lock = Lock("invoice-42", lambda ctx, key: released.append(key))
        >>> with lock:
        ...     pass
        ...
        >>> released
        ['invoice-42']

        ```
    """

    def __init__(self, key: Any, release_func: Callable[[Context, Any], Any]) -> None:
        self.key = key
        self.release_func = release_func
        self.metadata: dict[str, Any] = {}

    def release(self, ctx: Context | None = None) -> Any:
        """Release the lock.

        Exceptions raised by the release function are propagated as-is.

        Args:
            ctx: Optional context passed to the release function. A fresh
                context is used if omitted.

        Returns:
            Whatever the release function returns.
        """
        return self.release_func(ctx if ctx is not None else Context(), self.key)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(key={self.key!r})"


class AsyncLock(Lock):
    """Handle for a lock acquired by ``AsyncLocker``.

    Same as ``Lock``, except that ``release`` is a coroutine and the handle
    is an asynchronous context manager.

    Example:
        ```pycon
        >>> import asyncio
        >>> from alocker.lock import AsyncLock
        >>> async def release(ctx, key):
        ...     print(f"released {key}")
        ...
        >>> async def main():
        ...     async with AsyncLock("invoice-42", release):
        ...         pass
        ...
        >>> asyncio.run(main())
        released invoice-42

        ```
    """

    def __init__(self, key: Any, release_func: Callable[[Context, Any], Awaitable[Any]]) -> None:
        super().__init__(key, release_func)

    async def release(self, ctx: Context | None = None) -> Any:
        """Release the lock.

        Exceptions raised by the release function are propagated as-is.

        Args:
            ctx: Optional context passed to the release function. A fresh
                context is used if omitted.

        Returns:
            Whatever the release function returns.
        """
        return await self.release_func(ctx if ctx is not None else Context(), self.key)

    def __enter__(self) -> Self:
        msg = f"{self.__class__.__qualname__} must be used with 'async with'"
        raise TypeError(msg)

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.release()


# Options applied, in order, to a lock handle right after acquisition
LockOption = Callable[[Lock], None]


def with_metadata(**values: Any) -> LockOption:
    """Return a lock option that stores values in ``Lock.metadata``.

    Example:
        ```pycon
        >>> from alocker.lock import Lock, with_metadata
        >>> lock = Lock("invoice-42", lambda ctx, key: None)
        >>> with_metadata(owner="billing")(lock)
        >>> lock.metadata
        {'owner': 'billing'}

        ```
    """

    def apply(lock: Lock) -> None:
        lock.metadata.update(values)

    return apply
