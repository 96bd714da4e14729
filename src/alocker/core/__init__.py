r"""Core shared logic for sync and async lockers.

This module contains configuration, validation and the attempt
bookkeeping shared by ``Locker`` and ``AsyncLocker``.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_DELAY",
    "DEFAULT_MAX_ATTEMPTS",
    "LockerConfig",
    "check_cancelled",
    "is_already_locked",
    "raise_acquire_error",
    "raise_max_attempts",
    "validate_locker_params",
]

from alocker.core.attempts import (
    check_cancelled,
    is_already_locked,
    raise_acquire_error,
    raise_max_attempts,
)
from alocker.core.config import DEFAULT_DELAY, DEFAULT_MAX_ATTEMPTS, LockerConfig
from alocker.core.validation import validate_locker_params
