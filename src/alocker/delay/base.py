r"""Abstract base classes for delay strategies."""

from __future__ import annotations

__all__ = ["BaseAttemptDelay", "BaseDelay"]

import threading
from abc import ABC, abstractmethod


class BaseDelay(ABC):
    """Abstract base class for delay strategies.

    A delay strategy produces the successive wait durations used between
    lock acquisition attempts. Each call to ``next`` returns the next wait
    and may advance internal state.

    Strategies derived from ``BaseAttemptDelay`` compute each wait from
    the retry number of the acquisition in progress. Custom stateful
    strategies that only implement ``next`` share their state between
    every acquisition of the lockers using them.
    """

    @abstractmethod
    def next(self) -> float:
        """Return the next wait duration and advance the strategy.

        Returns:
            The non-negative delay in seconds before the next attempt.
        """

    def for_attempt(self, attempt: int) -> float:  # noqa: ARG002
        """Return the wait duration after the given retry of one
        acquisition.

        Lockers call this with the retry number of the current
        ``acquire`` call, so each call starts its own sequence. The
        default delegates to ``next``, which suits strategies whose value
        does not depend on the attempt.

        Args:
            attempt: The retry number (0-indexed) within one acquisition.

        Returns:
            The delay in seconds.
        """
        return self.next()


class BaseAttemptDelay(BaseDelay):
    """Base class for delay strategies computed from an attempt counter.

    Subclasses implement ``calculate``; ``next`` feeds it the current
    attempt number (0-indexed) and increments the counter. The counter is
    protected by a lock so interleaved calls from several threads never
    lose an increment. ``for_attempt`` bypasses the counter, so lockers
    restart the sequence on every acquisition.
    """

    def __init__(self) -> None:
        self._attempt = 0
        self._lock = threading.Lock()

    @property
    def attempt(self) -> int:
        """The number of ``next`` calls since creation or last reset."""
        return self._attempt

    def next(self) -> float:
        with self._lock:
            attempt = self._attempt
            self._attempt += 1
        return self.calculate(attempt)

    def for_attempt(self, attempt: int) -> float:
        return self.calculate(attempt)

    def reset(self) -> None:
        """Reset the attempt counter to zero."""
        with self._lock:
            self._attempt = 0

    @abstractmethod
    def calculate(self, attempt: int) -> float:
        """Calculate the delay for a given attempt.

        Args:
            attempt: The attempt number (0-indexed). For example,
                attempt=0 is the wait before the first retry.

        Returns:
            The delay in seconds.
        """
