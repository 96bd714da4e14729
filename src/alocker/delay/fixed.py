r"""Fixed delay strategy."""

from __future__ import annotations

__all__ = ["DEFAULT_DELAY", "FixedDelay"]

from alocker.delay.base import BaseAttemptDelay

# Default wait between two acquisition attempts: 5 milliseconds
DEFAULT_DELAY = 0.005


class FixedDelay(BaseAttemptDelay):
    """Fixed delay strategy.

    Returns the same delay for every attempt. The attempt counter is only
    tracked for introspection and never changes the returned value.

    Args:
        delay: The fixed delay in seconds (default: 0.005).

    Example:
        ```pycon
        >>> from alocker.delay import FixedDelay
        >>> delay = FixedDelay(delay=0.01)
        >>> delay.next()
        0.01
        >>> delay.next()
        0.01
        >>> delay.attempt
        2

        ```
    """

    def __init__(self, delay: float = DEFAULT_DELAY) -> None:
        if delay < 0:
            msg = f"delay must be non-negative, got {delay}"
            raise ValueError(msg)
        super().__init__()
        self.delay = delay

    def calculate(self, attempt: int) -> float:  # noqa: ARG002
        return self.delay

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(delay={self.delay})"
