r"""Parameter validation utilities for lockers."""

from __future__ import annotations

__all__ = ["validate_locker_params"]

from typing import Any

from alocker.delay.base import BaseDelay


def validate_locker_params(max_attempts: Any, delay: Any = None) -> None:
    """Validate locker parameters.

    Args:
        max_attempts: Maximum number of acquisition attempts. Must be an
            integer >= 0. A value of 0 means ``acquire`` gives up without
            calling the acquire function.
        delay: Optional delay strategy. Must be a ``BaseDelay`` instance
            if provided.

    Raises:
        TypeError: If max_attempts is not an integer or delay is not a
            ``BaseDelay``.
        ValueError: If max_attempts is negative.

    Example:
        ```pycon
        >>> from alocker.core import validate_locker_params
        >>> from alocker.delay import FixedDelay
        >>> validate_locker_params(max_attempts=6)
        >>> validate_locker_params(max_attempts=3, delay=FixedDelay(0.1))
        >>> validate_locker_params(max_attempts=-1)
        Traceback (most recent call last):
            ...
        ValueError: max_attempts must be >= 0, got -1

        ```
    """
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int):
        msg = f"max_attempts must be an int, got {type(max_attempts).__name__}"
        raise TypeError(msg)
    if max_attempts < 0:
        msg = f"max_attempts must be >= 0, got {max_attempts}"
        raise ValueError(msg)
    if delay is not None and not isinstance(delay, BaseDelay):
        msg = f"delay must be a BaseDelay instance, got {type(delay).__name__}"
        raise TypeError(msg)
