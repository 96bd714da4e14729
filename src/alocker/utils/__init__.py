r"""Utility functions for lockers."""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "get_lock_key",
    "lock_key_scope",
    "log_structured",
    "set_lock_key",
]

from alocker.utils.structured_logging import (
    StructuredFormatter,
    get_lock_key,
    lock_key_scope,
    log_structured,
    set_lock_key,
)
