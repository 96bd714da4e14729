r"""Unit tests for the synchronous Locker."""

from __future__ import annotations

import threading
from unittest.mock import Mock, call

import pytest

from alocker import (
    AcquireError,
    AlreadyLockedError,
    Context,
    Lock,
    LockCancelledError,
    Locker,
    LockerConfig,
    MaxAttemptsReachedError,
    with_metadata,
)
from alocker.delay import (
    BaseAttemptDelay,
    ExponentialDelay,
    FixedDelay,
    JitterDelay,
    LinearDelay,
)
from tests.helpers import CountingDelay, InMemoryLockTable

##############################
#     Tests for __init__     #
##############################


def test_locker_defaults(release_func: Mock) -> None:
    """Test default delay and max attempts."""
    locker = Locker(Mock(), release_func)
    assert locker.max_attempts == 6
    assert isinstance(locker.delay, FixedDelay)
    assert locker.delay.delay == 0.005


def test_locker_with_config(zero_delay: CountingDelay, release_func: Mock) -> None:
    """Test that the config overrides delay and max attempts."""
    config = LockerConfig(delay=zero_delay, max_attempts=3)
    locker = Locker(Mock(), release_func, config=config)
    assert locker.config is config
    assert locker.delay is zero_delay
    assert locker.max_attempts == 3


def test_locker_default_delays_are_not_shared(release_func: Mock) -> None:
    """Test that each locker owns its default delay strategy."""
    assert Locker(Mock(), release_func).delay is not Locker(Mock(), release_func).delay


def test_locker_does_not_call_collaborators_on_creation(release_func: Mock) -> None:
    acquire_func = Mock()
    Locker(acquire_func, release_func)
    acquire_func.assert_not_called()
    release_func.assert_not_called()


def test_locker_repr(release_func: Mock) -> None:
    assert repr(Locker(Mock(), release_func)) == "Locker(delay=FixedDelay(delay=0.005), max_attempts=6)"


#############################
#     Tests for acquire     #
#############################


def test_acquire_success_first_attempt(
    ctx: Context, zero_delay: CountingDelay, release_func: Mock
) -> None:
    """Test successful acquisition without retries."""
    acquire_func = Mock(return_value=None)
    locker = Locker(acquire_func, release_func, config=LockerConfig(delay=zero_delay))

    lock = locker.acquire("key", ctx=ctx)

    assert isinstance(lock, Lock)
    assert lock.key == "key"
    acquire_func.assert_called_once_with(ctx, "key")
    assert zero_delay.calls == 0


def test_acquire_creates_context_when_omitted(release_func: Mock) -> None:
    acquire_func = Mock(return_value=None)
    Locker(acquire_func, release_func).acquire("key")
    ctx, key = acquire_func.call_args.args
    assert isinstance(ctx, Context)
    assert key == "key"


def test_acquire_already_locked_then_success(
    zero_delay: CountingDelay, release_func: Mock
) -> None:
    """Test locked on the first call, acquired on the second."""
    acquire_func = Mock(side_effect=[AlreadyLockedError(), None])
    locker = Locker(acquire_func, release_func, config=LockerConfig(delay=zero_delay))

    lock = locker.acquire("key")

    assert lock is not None
    assert lock.key == "key"
    assert acquire_func.call_count == 2
    assert zero_delay.calls == 1


@pytest.mark.parametrize("success_attempt", [1, 2, 3, 6])
def test_acquire_success_on_attempt_k(
    success_attempt: int, zero_delay: CountingDelay, release_func: Mock
) -> None:
    """Test that success on attempt k makes exactly k calls."""
    side_effect = [AlreadyLockedError()] * (success_attempt - 1) + [None]
    acquire_func = Mock(side_effect=side_effect)
    locker = Locker(acquire_func, release_func, config=LockerConfig(delay=zero_delay))

    locker.acquire("key")

    assert acquire_func.call_count == success_attempt
    assert zero_delay.calls == success_attempt - 1


def test_acquire_max_attempts_reached(zero_delay: CountingDelay, release_func: Mock) -> None:
    """Test that an always-locked resource is tried exactly max_attempts
    times."""
    acquire_func = Mock(side_effect=AlreadyLockedError())
    locker = Locker(
        acquire_func, release_func, config=LockerConfig(delay=zero_delay, max_attempts=5)
    )

    with pytest.raises(MaxAttemptsReachedError, match=r"after 5 attempts") as exc_info:
        locker.acquire("key")

    assert acquire_func.call_count == 5
    assert zero_delay.calls == 5
    assert exc_info.value.key == "key"
    assert exc_info.value.attempts == 5
    assert isinstance(exc_info.value.__cause__, AlreadyLockedError)


def test_acquire_max_attempts_with_fixed_zero_delay(release_func: Mock) -> None:
    attempts = 0

    def acquire(ctx: Context, key: str) -> None:
        nonlocal attempts
        attempts += 1
        raise AlreadyLockedError(key=key)

    locker = Locker(acquire, release_func, config=LockerConfig(delay=FixedDelay(0), max_attempts=5))
    with pytest.raises(MaxAttemptsReachedError):
        locker.acquire("")
    assert attempts == 5


def test_acquire_default_max_attempts(zero_delay: CountingDelay, release_func: Mock) -> None:
    acquire_func = Mock(side_effect=AlreadyLockedError())
    locker = Locker(acquire_func, release_func, config=LockerConfig(delay=zero_delay))
    with pytest.raises(MaxAttemptsReachedError):
        locker.acquire("key")
    assert acquire_func.call_count == 6


def test_acquire_zero_max_attempts(release_func: Mock) -> None:
    """Test that zero attempts gives up without calling acquire."""
    acquire_func = Mock()
    locker = Locker(acquire_func, release_func, config=LockerConfig(max_attempts=0))
    with pytest.raises(MaxAttemptsReachedError):
        locker.acquire("key")
    acquire_func.assert_not_called()


def test_acquire_already_locked_subclass_is_retried(
    zero_delay: CountingDelay, release_func: Mock
) -> None:
    class RowLockedError(AlreadyLockedError):
        pass

    acquire_func = Mock(side_effect=[RowLockedError(), None])
    locker = Locker(acquire_func, release_func, config=LockerConfig(delay=zero_delay))
    locker.acquire("key")
    assert acquire_func.call_count == 2


def test_acquire_generic_error_is_not_retried(
    zero_delay: CountingDelay, release_func: Mock
) -> None:
    """Test that a non already-locked error fails immediately."""
    cause = OSError("disk full")
    acquire_func = Mock(side_effect=cause)
    locker = Locker(acquire_func, release_func, config=LockerConfig(delay=zero_delay))

    with pytest.raises(AcquireError, match=r"cannot acquire lock for key") as exc_info:
        locker.acquire("invoice-42")

    message = str(exc_info.value)
    assert "invoice-42" in message
    assert "disk full" in message
    assert exc_info.value.key == "invoice-42"
    assert exc_info.value.cause is cause
    assert exc_info.value.__cause__ is cause
    acquire_func.assert_called_once()
    assert zero_delay.calls == 0


def test_acquire_generic_error_after_already_locked(
    zero_delay: CountingDelay, release_func: Mock
) -> None:
    acquire_func = Mock(side_effect=[AlreadyLockedError(), ValueError("boom")])
    locker = Locker(acquire_func, release_func, config=LockerConfig(delay=zero_delay))
    with pytest.raises(AcquireError, match=r"boom"):
        locker.acquire("key")
    assert acquire_func.call_count == 2


def test_acquire_base_exception_propagates(release_func: Mock) -> None:
    acquire_func = Mock(side_effect=KeyboardInterrupt)
    locker = Locker(acquire_func, release_func)
    with pytest.raises(KeyboardInterrupt):
        locker.acquire("key")


def test_acquire_applies_options_in_order(release_func: Mock) -> None:
    """Test that lock options are applied in the given order."""
    calls = []

    def first(lock: Lock) -> None:
        calls.append(("first", lock.key))

    def second(lock: Lock) -> None:
        calls.append(("second", lock.key))

    locker = Locker(Mock(return_value=None), release_func)
    locker.acquire("key", first, second, with_metadata(owner="billing"))

    assert calls == [("first", "key"), ("second", "key")]


def test_acquire_options_not_applied_on_failure(release_func: Mock) -> None:
    option = Mock()
    locker = Locker(Mock(side_effect=OSError("down")), release_func)
    with pytest.raises(AcquireError):
        locker.acquire("key", option)
    option.assert_not_called()


def test_acquire_with_metadata(release_func: Mock) -> None:
    locker = Locker(Mock(return_value=None), release_func)
    lock = locker.acquire("key", with_metadata(owner="billing", ttl=30))
    assert lock.metadata == {"owner": "billing", "ttl": 30}


def test_acquire_waits_with_delay(release_func: Mock) -> None:
    """Test that the wait duration comes from the delay strategy."""
    ctx = Mock(spec=Context, cancelled=False)
    ctx.wait.return_value = False
    acquire_func = Mock(side_effect=[AlreadyLockedError(), AlreadyLockedError(), None])
    locker = Locker(acquire_func, release_func, config=LockerConfig(delay=FixedDelay(0.25)))

    locker.acquire("key", ctx=ctx)

    assert ctx.wait.call_args_list == [call(0.25), call(0.25)]


@pytest.mark.parametrize(
    "delay",
    [
        ExponentialDelay(base_delay=0.5),
        ExponentialDelay(base_delay=0.5, max_delay=1.5),
        LinearDelay(base_delay=0.5),
        JitterDelay(LinearDelay(base_delay=0.5), jitter_factor=0.0),
    ],
)
def test_acquire_restarts_delay_sequence_on_each_call(
    delay: BaseAttemptDelay | JitterDelay, release_func: Mock
) -> None:
    """Test that every acquire call waits with the same sequence."""
    ctx = Mock(spec=Context, cancelled=False)
    ctx.wait.return_value = False
    locker = Locker(
        Mock(side_effect=AlreadyLockedError()),
        release_func,
        config=LockerConfig(delay=delay, max_attempts=4),
    )

    for _ in range(3):
        with pytest.raises(MaxAttemptsReachedError):
            locker.acquire("key", ctx=ctx)

    waits = [c.args[0] for c in ctx.wait.call_args_list]
    assert len(waits) == 12
    assert waits[0:4] == waits[4:8] == waits[8:12]
    assert waits[0] == 0.5


def test_acquire_exponential_delay_long_lived_locker(release_func: Mock) -> None:
    ctx = Mock(spec=Context, cancelled=False)
    ctx.wait.return_value = False
    locker = Locker(
        Mock(side_effect=AlreadyLockedError()),
        release_func,
        config=LockerConfig(delay=ExponentialDelay(), max_attempts=6),
    )

    for _ in range(50):
        with pytest.raises(MaxAttemptsReachedError):
            locker.acquire("key", ctx=ctx)

    assert max(c.args[0] for c in ctx.wait.call_args_list) == pytest.approx(0.005 * 2**5)


def test_acquire_clamps_negative_delay(release_func: Mock, mock_callback: Mock) -> None:
    ctx = Mock(spec=Context, cancelled=False)
    ctx.wait.return_value = False
    locker = Locker(
        Mock(side_effect=[AlreadyLockedError(), None]),
        release_func,
        config=LockerConfig(delay=CountingDelay(-1.0), on_retry=mock_callback),
    )

    locker.acquire("key", ctx=ctx)

    ctx.wait.assert_called_once_with(0.0)
    assert mock_callback.call_args.args[0].wait_time == 0.0


def test_acquire_non_hashable_key(release_func: Mock) -> None:
    key = {"table": "invoices", "id": 42}
    lock = Locker(Mock(return_value=None), release_func).acquire(key)
    assert lock.key is key


##################################
#     Tests for cancellation     #
##################################


def test_acquire_cancelled_context_before_start(release_func: Mock) -> None:
    ctx = Context()
    ctx.cancel()
    acquire_func = Mock()
    locker = Locker(acquire_func, release_func)

    with pytest.raises(LockCancelledError, match=r"cancelled for key 'key'"):
        locker.acquire("key", ctx=ctx)
    acquire_func.assert_not_called()


def test_acquire_cancel_interrupts_wait(release_func: Mock) -> None:
    """Test that cancelling the context ends the wait and stops
    retrying."""
    ctx = Context()
    acquire_func = Mock(side_effect=AlreadyLockedError())
    locker = Locker(acquire_func, release_func, config=LockerConfig(delay=FixedDelay(30.0)))
    timer = threading.Timer(0.05, ctx.cancel)
    timer.start()
    try:
        with pytest.raises(LockCancelledError) as exc_info:
            locker.acquire("key", ctx=ctx)
    finally:
        timer.cancel()

    assert exc_info.value.reason == "cancelled"
    acquire_func.assert_called_once()


def test_acquire_deadline_exceeded(release_func: Mock) -> None:
    ctx = Context(timeout=0.05)
    acquire_func = Mock(side_effect=AlreadyLockedError())
    locker = Locker(acquire_func, release_func, config=LockerConfig(delay=FixedDelay(30.0)))

    with pytest.raises(LockCancelledError, match=r"deadline exceeded") as exc_info:
        locker.acquire("key", ctx=ctx)

    assert exc_info.value.reason == "deadline exceeded"
    acquire_func.assert_called_once()


##########################################
#     Tests for release and handles     #
##########################################


def test_release_uses_acquired_key(ctx: Context) -> None:
    release_func = Mock(return_value="released")
    locker = Locker(Mock(return_value=None), release_func)
    lock = locker.acquire("key")

    assert lock.release(ctx) == "released"
    release_func.assert_called_once_with(ctx, "key")


def test_release_error_is_not_wrapped() -> None:
    error = RuntimeError("connection lost")
    locker = Locker(Mock(return_value=None), Mock(side_effect=error))
    lock = locker.acquire("key")
    with pytest.raises(RuntimeError) as exc_info:
        lock.release()
    assert exc_info.value is error


def test_release_can_be_called_twice(release_func: Mock) -> None:
    lock = Locker(Mock(return_value=None), release_func).acquire("key")
    lock.release()
    lock.release()
    assert release_func.call_count == 2


def test_lock_table_round_trip(lock_table: InMemoryLockTable) -> None:
    locker = Locker(lock_table.acquire, lock_table.release)
    with locker.acquire("key"):
        assert lock_table.is_held("key")
    assert not lock_table.is_held("key")
    assert lock_table.release_calls == ["key"]


def test_lock_table_held_key_exhausts_attempts(
    lock_table: InMemoryLockTable, zero_delay: CountingDelay
) -> None:
    locker = Locker(
        lock_table.acquire, lock_table.release, config=LockerConfig(delay=zero_delay, max_attempts=3)
    )
    locker.acquire("key")
    with pytest.raises(MaxAttemptsReachedError):
        locker.acquire("key")
    assert lock_table.acquire_calls == ["key"] * 4


###############################
#     Tests for callbacks     #
###############################


def test_acquire_callbacks_on_success(zero_delay: CountingDelay, release_func: Mock) -> None:
    on_attempt, on_retry, on_success, on_failure = Mock(), Mock(), Mock(), Mock()
    config = LockerConfig(
        delay=zero_delay,
        max_attempts=4,
        on_attempt=on_attempt,
        on_retry=on_retry,
        on_success=on_success,
        on_failure=on_failure,
    )
    locker = Locker(Mock(side_effect=[AlreadyLockedError(), None]), release_func, config=config)

    locker.acquire("key")

    assert [c.args[0].attempt for c in on_attempt.call_args_list] == [1, 2]
    on_retry.assert_called_once()
    retry_info = on_retry.call_args.args[0]
    assert retry_info.key == "key"
    assert retry_info.attempt == 1
    assert retry_info.max_attempts == 4
    assert retry_info.wait_time == 0.0
    assert isinstance(retry_info.error, AlreadyLockedError)
    success_info = on_success.call_args.args[0]
    assert success_info.attempt == 2
    assert success_info.total_time >= 0
    on_failure.assert_not_called()


def test_acquire_on_failure_max_attempts(zero_delay: CountingDelay, release_func: Mock) -> None:
    on_failure = Mock()
    config = LockerConfig(delay=zero_delay, max_attempts=2, on_failure=on_failure)
    locker = Locker(Mock(side_effect=AlreadyLockedError()), release_func, config=config)

    with pytest.raises(MaxAttemptsReachedError) as exc_info:
        locker.acquire("key")

    failure_info = on_failure.call_args.args[0]
    assert failure_info.error is exc_info.value
    assert failure_info.attempt == 2


def test_acquire_on_failure_acquire_error(release_func: Mock) -> None:
    on_failure = Mock()
    locker = Locker(
        Mock(side_effect=OSError("disk full")),
        release_func,
        config=LockerConfig(on_failure=on_failure),
    )
    with pytest.raises(AcquireError) as exc_info:
        locker.acquire("key")
    failure_info = on_failure.call_args.args[0]
    assert failure_info.error is exc_info.value
    assert failure_info.attempt == 1
