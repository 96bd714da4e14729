from __future__ import annotations

from unittest.mock import Mock

import pytest

from alocker import Context
from tests.helpers import CountingDelay, InMemoryLockTable


@pytest.fixture
def ctx() -> Context:
    """Create a fresh context without deadline."""
    return Context()


@pytest.fixture
def lock_table() -> InMemoryLockTable:
    """Create an empty in-memory lock table."""
    return InMemoryLockTable()


@pytest.fixture
def zero_delay() -> CountingDelay:
    """Create a delay strategy that never waits and counts its calls."""
    return CountingDelay(0.0)


@pytest.fixture
def release_func() -> Mock:
    """Create a mock release function."""
    return Mock(return_value=None)


@pytest.fixture
def mock_callback() -> Mock:
    """Create a mock callback function for testing callbacks."""
    return Mock()
