r"""Linear delay strategy."""

from __future__ import annotations

__all__ = ["LinearDelay"]

from alocker.delay.base import BaseAttemptDelay


class LinearDelay(BaseAttemptDelay):
    """Linear delay strategy.

    Calculates delay as: base_delay * (attempt + 1), with optional max_delay cap.

    Args:
        base_delay: The base delay in seconds (default: 0.005).
        max_delay: Optional maximum delay cap in seconds.

    Example:
        ```pycon
        >>> from alocker.delay import LinearDelay
        >>> delay = LinearDelay(base_delay=1.0, max_delay=2.5)
        >>> delay.next()
        1.0
        >>> delay.next()
        2.0
        >>> delay.next()  # Would be 3.0, but capped
        2.5

        ```
    """

    def __init__(self, base_delay: float = 0.005, max_delay: float | None = None) -> None:
        if base_delay < 0:
            msg = f"base_delay must be non-negative, got {base_delay}"
            raise ValueError(msg)
        if max_delay is not None and max_delay <= 0:
            msg = f"max_delay must be positive if specified, got {max_delay}"
            raise ValueError(msg)
        super().__init__()
        self.base_delay = base_delay
        self.max_delay = max_delay

    def calculate(self, attempt: int) -> float:
        delay = self.base_delay * (attempt + 1)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        return delay
