r"""Exponential delay strategy."""

from __future__ import annotations

__all__ = ["ExponentialDelay"]

import math

from alocker.delay.base import BaseAttemptDelay


class ExponentialDelay(BaseAttemptDelay):
    """Exponential delay strategy.

    Calculates delay as: base_delay * (multiplier ** attempt), with optional
    max_delay cap. Lockers restart at attempt 0 on every ``acquire``
    call; standalone ``next`` calls advance a counter that ``reset``
    clears. Without max_delay, attempts too large for a float give an
    infinite delay.

    Args:
        base_delay: The delay before the first retry (default: 0.005).
        multiplier: The growth factor between two delays (default: 2.0).
            Must be >= 1.
        max_delay: Optional maximum delay cap in seconds.

    Example:
        ```pycon
        >>> from alocker.delay import ExponentialDelay
        >>> delay = ExponentialDelay(base_delay=0.5, max_delay=1.5)
        >>> delay.next()
        0.5
        >>> delay.next()
        1.0
        >>> delay.next()  # Would be 2.0, but capped
        1.5
        >>> delay.reset()
        >>> delay.next()
        0.5

        ```
    """

    def __init__(
        self,
        base_delay: float = 0.005,
        multiplier: float = 2.0,
        max_delay: float | None = None,
    ) -> None:
        if base_delay < 0:
            msg = f"base_delay must be non-negative, got {base_delay}"
            raise ValueError(msg)
        if multiplier < 1:
            msg = f"multiplier must be >= 1, got {multiplier}"
            raise ValueError(msg)
        if max_delay is not None and max_delay <= 0:
            msg = f"max_delay must be positive if specified, got {max_delay}"
            raise ValueError(msg)
        super().__init__()
        self.base_delay = base_delay
        self.multiplier = multiplier
        self.max_delay = max_delay

    def calculate(self, attempt: int) -> float:
        # Avoid float overflow on very long retry sequences
        try:
            delay = self.base_delay * (self.multiplier**attempt)
        except OverflowError:
            delay = math.inf if self.base_delay > 0 else 0.0
        if self.max_delay is not None:
            return min(delay, self.max_delay)
        return delay
