r"""alocker - Retry-driven lock acquisition helper.

This package wraps caller-supplied acquire and release functions (backed
by a database, a distributed lock service, a file system or an in-memory
map) with a uniform retry policy. When acquisition reports that the
resource is already locked, the locker waits according to a pluggable
delay strategy and retries, up to a bounded number of attempts.

Key Features:
    - Synchronous ``Locker`` and asyncio ``AsyncLocker``
    - Pluggable delay strategies: Fixed, Linear, Exponential, Jitter, and custom
    - Clear error taxonomy: retryable ``AlreadyLockedError`` versus fatal
      ``AcquireError`` and terminal ``MaxAttemptsReachedError``
    - Cancellable waits through a ``Context`` with optional deadline
    - Lock handles usable as (async) context managers
    - Callback system for observability (logging, metrics, alerting)

Example:
    ```pycon
    >>> from alocker import AlreadyLockedError, Locker, LockerConfig
    >>> from alocker.delay import ExponentialDelay
    >>> held = set()
    >>> def acquire(ctx, key):
    ...     if key in held:
    ...         raise AlreadyLockedError(key=key)
    ...     held.add(key)
    ...
    >>> locker = Locker(
    ...     acquire,
    ...     lambda ctx, key: held.discard(key),
    ...     config=LockerConfig(delay=ExponentialDelay(base_delay=0.01), max_attempts=3),
    ... )
    >>> lock = locker.acquire("report-2024")
    >>> lock.key
    'report-2024'
    >>> lock.release()

    ```
"""

from __future__ import annotations

__all__ = [
    "AcquireError",
    "AlreadyLockedError",
    "AsyncLock",
    "AsyncLocker",
    "Context",
    "DEFAULT_DELAY",
    "DEFAULT_MAX_ATTEMPTS",
    "Lock",
    "LockCancelledError",
    "LockError",
    "Locker",
    "LockerConfig",
    "MaxAttemptsReachedError",
    "__version__",
    "with_metadata",
]

from importlib.metadata import PackageNotFoundError, version

from alocker.context import Context
from alocker.core.config import DEFAULT_DELAY, DEFAULT_MAX_ATTEMPTS, LockerConfig
from alocker.exceptions import (
    AcquireError,
    AlreadyLockedError,
    LockCancelledError,
    LockError,
    MaxAttemptsReachedError,
)
from alocker.lock import AsyncLock, Lock, with_metadata
from alocker.locker import Locker
from alocker.locker_async import AsyncLocker

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
