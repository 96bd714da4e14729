r"""Structured logging utilities for machine-readable log output.

Lockers log through the standard ``logging`` module. This module provides
an opt-in JSON formatter that adds the key currently being acquired to
every record, which helps correlate retries of the same key in log
aggregation systems.

Example:
    Enable structured logging for alocker:

    ```python
    import logging
    from alocker.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("alocker")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "get_lock_key",
    "lock_key_scope",
    "log_structured",
    "set_lock_key",
]

import contextvars
import json
import logging
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Generator

_MISSING = object()

# Key being acquired in the current thread or task
_lock_key: contextvars.ContextVar[Any] = contextvars.ContextVar("lock_key", default=_MISSING)

_RESERVED_ATTRIBUTES = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def get_lock_key() -> Any:
    """Get the key being acquired in the current context.

    Returns:
        The key, or None if no acquisition is in progress.

    Example:
        ```pycon
        >>> from alocker.utils.structured_logging import get_lock_key, lock_key_scope
        >>> get_lock_key()
        >>> with lock_key_scope("invoice-42"):
        ...     get_lock_key()
        ...
        'invoice-42'

        ```
    """
    key = _lock_key.get()
    return None if key is _MISSING else key


def set_lock_key(key: Any) -> contextvars.Token:
    """Set the key being acquired in the current context.

    Args:
        key: The lock key.

    Returns:
        A token that can be passed to ``contextvars.ContextVar.reset``.
    """
    return _lock_key.set(key)


@contextmanager
def lock_key_scope(key: Any) -> Generator[None, None, None]:
    """Bind the lock key to the current context for the ``with`` block."""
    token = _lock_key.set(key)
    try:
        yield
    finally:
        _lock_key.reset(token)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Standard fields in the JSON output: timestamp, level, logger, message,
    module, function, line, thread and process. ``lock_key`` is added when
    a key is bound to the current context, and any field passed with
    ``extra`` is kept.

    Example:
        ```pycon
        >>> import logging
        >>> from io import StringIO
        >>> from alocker.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("test_structured_formatter")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("Lock acquired", extra={"attempt": 2})
        >>> '"attempt": 2' in stream.getvalue()
        True

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread": record.threadName,
            "process": record.process,
        }

        key = get_lock_key()
        if key is not None:
            log_data["lock_key"] = key

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for name, value in record.__dict__.items():
            if name not in _RESERVED_ATTRIBUTES:
                log_data[name] = value

        return json.dumps(log_data, default=repr)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: ARG002
        """Format timestamp as ISO 8601 with millisecond precision (UTC)."""
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(logger: logging.Logger, level: int, message: str, **extra: Any) -> None:
    """Log a message with structured data.

    The extra fields are included in the JSON output when using
    ``StructuredFormatter``.

    Args:
        logger: Logger to use.
        level: Log level (e.g., logging.INFO).
        message: Log message.
        **extra: Additional structured fields to include in the log.
    """
    logger.log(level, message, extra=extra)
