r"""Jitter decorator for delay strategies."""

from __future__ import annotations

__all__ = ["JitterDelay"]

import logging
import math
import random

from alocker.delay.base import BaseDelay

logger: logging.Logger = logging.getLogger(__name__)


class JitterDelay(BaseDelay):
    """Add random jitter on top of another delay strategy.

    The jitter is calculated as: random.uniform(0, jitter_factor) * base,
    and this jitter is ADDED to the delay returned by the wrapped strategy.
    Jitter spreads out the retries of callers competing for the same key.

    Args:
        delay: The wrapped delay strategy.
        jitter_factor: Factor for the random jitter (default: 0.1, i.e. up
            to 10% additional delay). Must be >= 0.
        rng: Optional random number generator, useful for reproducible
            sequences.

    Example:
        ```pycon
        >>> import random
        >>> from alocker.delay import FixedDelay, JitterDelay
        >>> delay = JitterDelay(FixedDelay(1.0), jitter_factor=0.5, rng=random.Random(0))
        >>> 1.0 <= delay.next() <= 1.5
        True

        ```
    """

    def __init__(
        self,
        delay: BaseDelay,
        jitter_factor: float = 0.1,
        rng: random.Random | None = None,
    ) -> None:
        if jitter_factor < 0:
            msg = f"jitter_factor must be >= 0, got {jitter_factor}"
            raise ValueError(msg)
        self.delay = delay
        self.jitter_factor = jitter_factor
        self._rng = rng or random.Random()  # noqa: S311

    def next(self) -> float:
        return self._add_jitter(self.delay.next())

    def for_attempt(self, attempt: int) -> float:
        return self._add_jitter(self.delay.for_attempt(attempt))

    def _add_jitter(self, base: float) -> float:
        if self.jitter_factor == 0 or not math.isfinite(base):
            return base
        jitter = self._rng.uniform(0, self.jitter_factor) * base
        logger.debug(f"Delay {base + jitter:.3f}s (base={base:.3f}s, jitter={jitter:.3f}s)")
        return base + jitter
