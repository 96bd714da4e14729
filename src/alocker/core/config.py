r"""Configuration dataclass and defaults for lockers.

This module provides configuration constants and a dataclass-based
configuration object shared by ``Locker`` and ``AsyncLocker``.
"""

from __future__ import annotations

__all__ = ["DEFAULT_DELAY", "DEFAULT_MAX_ATTEMPTS", "LockerConfig"]

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from alocker.core.validation import validate_locker_params
from alocker.delay.fixed import DEFAULT_DELAY, FixedDelay

if TYPE_CHECKING:
    from collections.abc import Callable

    from alocker.callbacks import AttemptInfo, FailureInfo, RetryInfo, SuccessInfo
    from alocker.delay.base import BaseDelay

# Default maximum number of acquisition attempts
# With the default 5ms delay, a locker gives up after roughly 30ms
DEFAULT_MAX_ATTEMPTS = 6


@dataclass
class LockerConfig:
    """Configuration for locker retry behavior.

    Args:
        delay: Optional delay strategy used between attempts. If ``None``,
            each locker creates its own ``FixedDelay`` of 5 milliseconds.
        max_attempts: Maximum number of acquisition attempts. Must be >= 0.
        on_attempt: Optional callback called before each attempt.
        on_retry: Optional callback called when the resource is locked,
            before waiting.
        on_success: Optional callback called when the lock is acquired.
        on_failure: Optional callback called before a failure is raised.

    Example:
        ```pycon
        >>> from alocker.core.config import LockerConfig
        >>> config = LockerConfig()  # Use defaults
        >>> config.max_attempts
        6
        >>> config = LockerConfig(max_attempts=10)
        >>> merged = config.merge(max_attempts=3)  # Override specific parameters
        >>> merged.max_attempts
        3
        >>> config.max_attempts  # Original unchanged
        10

        ```
    """

    delay: BaseDelay | None = None
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    on_attempt: Callable[[AttemptInfo], None] | None = None
    on_retry: Callable[[RetryInfo], None] | None = None
    on_success: Callable[[SuccessInfo], None] | None = None
    on_failure: Callable[[FailureInfo], None] | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Raises:
            TypeError: If a parameter has the wrong type.
            ValueError: If max_attempts is negative.
        """
        validate_locker_params(max_attempts=self.max_attempts, delay=self.delay)

    def merge(self, **overrides: Any) -> LockerConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new LockerConfig instance with overrides applied.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    def create_delay(self) -> BaseDelay:
        """Return the configured delay strategy or a fresh default one."""
        if self.delay is not None:
            return self.delay
        return FixedDelay(DEFAULT_DELAY)
