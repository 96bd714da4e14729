r"""Delay strategies for lock acquisition retries.

This package provides the strategies that decide how long a locker waits
between two acquisition attempts, including fixed, linear and
exponential delays and a jitter decorator.
"""

from __future__ import annotations

__all__ = [
    "BaseAttemptDelay",
    "BaseDelay",
    "ExponentialDelay",
    "FixedDelay",
    "JitterDelay",
    "LinearDelay",
]

from alocker.delay.base import BaseAttemptDelay, BaseDelay
from alocker.delay.exponential import ExponentialDelay
from alocker.delay.fixed import FixedDelay
from alocker.delay.jitter import JitterDelay
from alocker.delay.linear import LinearDelay
