r"""Exception hierarchy for lock acquisition.

``AlreadyLockedError`` is the only retryable condition: acquire functions
raise it when the resource is held by someone else. Every other exception
raised by an acquire function is fatal and surfaces as ``AcquireError``.
"""

from __future__ import annotations

__all__ = [
    "AcquireError",
    "AlreadyLockedError",
    "LockCancelledError",
    "LockError",
    "MaxAttemptsReachedError",
]

from typing import Any


class LockError(Exception):
    """Base class for all lock errors.

    Args:
        message: A descriptive error message.
        key: The key of the resource involved, if known.

    Example:
        ```pycon
        >>> from alocker.exceptions import LockError
        >>> error = LockError("something went wrong", key="invoice-42")
        >>> error.key
        'invoice-42'

        ```
    """

    def __init__(self, message: str, key: Any = None) -> None:
        super().__init__(message)
        self.key = key


class AlreadyLockedError(LockError):
    """Raised by an acquire function when the resource is already locked.

    This is the retryable condition. The locker catches it, waits, and
    tries again until the attempt budget is exhausted.

    Example:
        ```pycon
        >>> from alocker.exceptions import AlreadyLockedError
        >>> def acquire(ctx, key):
        ...     raise AlreadyLockedError(key=key)
        ...
        >>> try:
        ...     acquire(None, "invoice-42")
        ... except AlreadyLockedError as exc:
        ...     print(exc)
        ...
        resource already locked: 'invoice-42'

        ```
    """

    def __init__(self, message: str | None = None, key: Any = None) -> None:
        if message is None:
            message = "resource already locked"
            if key is not None:
                message = f"{message}: {key!r}"
        super().__init__(message, key=key)


class AcquireError(LockError):
    """Raised when the acquire function fails with a non-retryable error.

    Args:
        key: The key that could not be locked.
        cause: The original exception raised by the acquire function.

    Example:
        ```pycon
        >>> from alocker.exceptions import AcquireError
        >>> error = AcquireError("invoice-42", OSError("disk full"))
        >>> str(error)
        "cannot acquire lock for key 'invoice-42': disk full"

        ```
    """

    def __init__(self, key: Any, cause: BaseException) -> None:
        super().__init__(f"cannot acquire lock for key {key!r}: {cause}", key=key)
        self.cause = cause


class MaxAttemptsReachedError(LockError):
    """Raised when every attempt reported the resource as already locked.

    Args:
        key: The key that could not be locked.
        attempts: The number of acquisition attempts made.
    """

    def __init__(self, key: Any, attempts: int) -> None:
        super().__init__(
            f"maximum attempts reached: cannot acquire lock for key {key!r} "
            f"after {attempts} attempts",
            key=key,
        )
        self.attempts = attempts


class LockCancelledError(LockError):
    """Raised when the context is cancelled while acquiring a lock.

    Args:
        key: The key being locked, if known.
        reason: Why the context was cancelled (e.g. ``"deadline exceeded"``).
    """

    def __init__(self, key: Any = None, reason: str = "cancelled") -> None:
        message = f"lock acquisition {reason}"
        if key is not None:
            message = f"{message} for key {key!r}"
        super().__init__(message, key=key)
        self.reason = reason
