r"""Unit tests for the retry runner."""

from __future__ import annotations

import threading
from unittest.mock import Mock

import httpx
import pytest

from crudprobe.callbacks import AttemptInfo, FailureInfo, RetryInfo, SuccessInfo
from crudprobe.exceptions import (
    RetriesExhaustedError,
    RetryInterruptedError,
    StatusMismatchError,
    TransportError,
)
from crudprobe.outcome import AttemptOutcome
from crudprobe.request_spec import RequestSpec
from crudprobe.retry import CallbackConfig, RetryPolicy, RetryRunner
from tests.helpers import make_client


def fail_then_succeed(failures: int, error: Exception | None = None) -> Mock:
    """Create an operation failing ``failures`` times, then returning
    "ok"."""
    error = error or ConnectionError("Connection refused")
    return Mock(side_effect=[error] * failures + ["ok"])


##############################
#     Tests for defaults     #
##############################


def test_runner_default_policy() -> None:
    runner = RetryRunner()
    assert runner.policy == RetryPolicy(max_attempts=5, delay=10.0)
    assert not runner.cancelled


#################################
#     Tests for success path    #
#################################


def test_run_success_first_attempt(runner: RetryRunner, mock_sleep: Mock) -> None:
    """Test that a succeeding operation runs once without waiting."""
    operation = Mock(return_value=42)

    assert runner.run(operation) == 42
    operation.assert_called_once_with()
    mock_sleep.assert_not_called()


@pytest.mark.parametrize("failures", [1, 2, 3, 4])
def test_run_succeeds_after_k_failures(
    runner: RetryRunner, mock_sleep: Mock, failures: int
) -> None:
    """Test that k failures then a success take k+1 attempts and k
    waits."""
    operation = fail_then_succeed(failures)

    assert runner.run(operation) == "ok"
    assert operation.call_count == failures + 1
    assert mock_sleep.call_count == failures
    mock_sleep.assert_called_with(10.0)


#######################################
#     Tests for returned outcomes     #
#######################################


def unavailable(message: str = "Service unavailable") -> StatusMismatchError:
    response = httpx.Response(503, json={"error": message})
    return StatusMismatchError(
        method="GET", url="http://students.test/x", expected_status=200, response=response
    )


@pytest.mark.parametrize("failures", [0, 1, 3])
@pytest.mark.parametrize("returns_outcome", [False, True])
def test_run_failure_raised_or_returned(
    runner: RetryRunner, mock_sleep: Mock, failures: int, returns_outcome: bool
) -> None:
    """Test that a returned failed outcome is retried exactly like a
    raised failure."""
    success = AttemptOutcome.success(httpx.Response(200, json={}), {})
    if returns_outcome:
        results = [AttemptOutcome.failure(unavailable()) for _ in range(failures)]
        operation = Mock(side_effect=[*results, success])
    else:
        operation = Mock(side_effect=[*(unavailable() for _ in range(failures)), success])

    assert runner.run(operation) is success
    assert operation.call_count == failures + 1
    assert mock_sleep.call_count == failures


def test_run_returned_failure_exhausts(runner: RetryRunner, mock_sleep: Mock) -> None:
    last = unavailable("still down")
    results = [AttemptOutcome.failure(unavailable()) for _ in range(4)]
    operation = Mock(side_effect=[*results, AttemptOutcome.failure(last)])

    with pytest.raises(RetriesExhaustedError) as exc_info:
        runner.run(operation)

    assert operation.call_count == 5
    assert mock_sleep.call_count == 4
    assert exc_info.value.last_error is last


def test_run_retries_send_until_status_matches(runner: RetryRunner, mock_sleep: Mock) -> None:
    """Test that the non-raising send is retried on a status mismatch."""
    statuses = iter([503, 503, 200])
    client = make_client(handler=lambda request: httpx.Response(next(statuses)))
    spec = RequestSpec(method="GET", path="/actuator/health")

    outcome = runner.run(lambda: client.send(spec), policy=RetryPolicy(max_attempts=3, delay=1.0))

    assert outcome.ok
    assert outcome.status_code == 200
    assert mock_sleep.call_count == 2


def test_run_send_always_failing_makes_max_attempts(mock_sleep: Mock) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503)

    client = make_client(handler=handler)
    runner = RetryRunner(RetryPolicy(max_attempts=3, delay=1.0), sleep=mock_sleep)

    with pytest.raises(RetriesExhaustedError) as exc_info:
        runner.run(lambda: client.send(RequestSpec(method="GET", path="/actuator/health")))

    assert len(calls) == 3
    assert isinstance(exc_info.value.last_error, StatusMismatchError)


def test_run_non_outcome_return_value_is_success(runner: RetryRunner) -> None:
    assert runner.run(Mock(return_value=None)) is None


####################################
#     Tests for exhausted path     #
####################################


@pytest.mark.parametrize("max_attempts", [1, 2, 5])
def test_run_exhausts_after_max_attempts(mock_sleep: Mock, max_attempts: int) -> None:
    """Test that an always-failing operation runs max_attempts times
    with max_attempts - 1 waits."""
    runner = RetryRunner(RetryPolicy(max_attempts=max_attempts, delay=2.0), sleep=mock_sleep)
    last = ConnectionError("still refused")
    operation = Mock(side_effect=[ConnectionError("refused")] * (max_attempts - 1) + [last])

    with pytest.raises(RetriesExhaustedError) as exc_info:
        runner.run(operation, description="create student")

    assert operation.call_count == max_attempts
    assert mock_sleep.call_count == max_attempts - 1
    assert exc_info.value.attempts == max_attempts
    assert exc_info.value.last_error is last
    assert exc_info.value.__cause__ is last
    assert str(exc_info.value) == (
        f"create student failed after {max_attempts} attempts: still refused"
    )


def test_run_retries_assertion_failures_like_transport_failures(
    runner: RetryRunner, mock_sleep: Mock
) -> None:
    """Test that without a classifier every failure kind is retried."""
    response = Mock(status_code=404)
    errors = [
        TransportError(method="GET", url="http://x", message="refused"),
        StatusMismatchError(method="GET", url="http://x", expected_status=200, response=response),
        AssertionError("plain assertion"),
        ValueError("anything"),
    ]
    operation = Mock(side_effect=[*errors, "ok"])

    assert runner.run(operation) == "ok"
    assert operation.call_count == 5
    assert mock_sleep.call_count == 4


def test_run_zero_delay(mock_sleep: Mock) -> None:
    runner = RetryRunner(RetryPolicy(max_attempts=3, delay=0.0), sleep=mock_sleep)
    operation = fail_then_succeed(2)

    assert runner.run(operation) == "ok"
    mock_sleep.assert_called_with(0.0)


def test_run_with_real_zero_delay_wait() -> None:
    """Test the default event-based wait with a zero delay."""
    runner = RetryRunner(RetryPolicy(max_attempts=3, delay=0.0))
    assert runner.run(fail_then_succeed(2)) == "ok"


#########################################
#     Tests for per-call policy         #
#########################################


def test_run_per_call_policy_override(runner: RetryRunner, mock_sleep: Mock) -> None:
    """Test that a policy passed to run replaces the default for that
    call only."""
    operation = Mock(side_effect=ConnectionError("refused"))

    with pytest.raises(RetriesExhaustedError):
        runner.run(operation, policy=RetryPolicy(max_attempts=2, delay=1.5))

    assert operation.call_count == 2
    mock_sleep.assert_called_once_with(1.5)
    assert runner.policy.max_attempts == 5


#####################################
#     Tests for retry_if hook       #
#####################################


def test_run_retry_if_false_raises_immediately(runner: RetryRunner, mock_sleep: Mock) -> None:
    """Test that a failure rejected by retry_if is raised unchanged."""
    error = ValueError("permanent")
    operation = Mock(side_effect=error)
    policy = RetryPolicy(
        max_attempts=5, delay=1.0, retry_if=lambda exc: not isinstance(exc, ValueError)
    )

    with pytest.raises(ValueError, match=r"permanent") as exc_info:
        runner.run(operation, policy=policy)

    assert exc_info.value is error
    operation.assert_called_once()
    mock_sleep.assert_not_called()


def test_run_retry_if_true_keeps_retrying(runner: RetryRunner) -> None:
    policy = RetryPolicy(max_attempts=3, delay=1.0, retry_if=lambda exc: True)
    operation = fail_then_succeed(2)

    assert runner.run(operation, policy=policy) == "ok"
    assert operation.call_count == 3


#####################################
#     Tests for cancellation        #
#####################################


def test_run_cancel_during_wait_raises_interrupted(mock_sleep: Mock) -> None:
    """Test that a cancelled wait stops the loop at once."""
    runner = RetryRunner(RetryPolicy(max_attempts=5, delay=10.0), sleep=mock_sleep)
    mock_sleep.side_effect = lambda delay: runner.cancel()
    first = ConnectionError("refused")
    operation = Mock(side_effect=first)

    with pytest.raises(RetryInterruptedError) as exc_info:
        runner.run(operation, description="get student")

    operation.assert_called_once()
    assert exc_info.value.attempts == 1
    assert exc_info.value.last_error is first
    assert exc_info.value.__cause__ is first
    assert runner.cancelled


def test_run_cancel_state_is_kept_for_later_runs(mock_sleep: Mock) -> None:
    """Test that the cancelled state is not cleared by the runner."""
    runner = RetryRunner(RetryPolicy(max_attempts=3, delay=10.0), sleep=mock_sleep)
    runner.cancel()

    with pytest.raises(RetryInterruptedError):
        runner.run(Mock(side_effect=ConnectionError("refused")))
    with pytest.raises(RetryInterruptedError):
        runner.run(Mock(side_effect=ConnectionError("refused")))

    mock_sleep.assert_not_called()
    assert runner.cancel_event.is_set()


def test_run_cancelled_runner_still_returns_success() -> None:
    """Test that cancellation only affects waits."""
    runner = RetryRunner(RetryPolicy(max_attempts=3, delay=10.0))
    runner.cancel()
    assert runner.run(Mock(return_value="ok")) == "ok"


def test_run_cancel_from_another_thread() -> None:
    """Test that a real event-based wait is interrupted by another
    thread."""
    event = threading.Event()
    runner = RetryRunner(RetryPolicy(max_attempts=3, delay=30.0), cancel_event=event)
    timer = threading.Timer(0.05, event.set)
    timer.start()
    try:
        with pytest.raises(RetryInterruptedError):
            runner.run(Mock(side_effect=ConnectionError("refused")))
    finally:
        timer.cancel()


def test_run_does_not_retry_interrupted_error_from_operation(
    runner: RetryRunner, mock_sleep: Mock
) -> None:
    error = RetryInterruptedError("nested", 1)
    operation = Mock(side_effect=error)

    with pytest.raises(RetryInterruptedError) as exc_info:
        runner.run(operation)

    assert exc_info.value is error
    operation.assert_called_once()
    mock_sleep.assert_not_called()


def test_run_keyboard_interrupt_propagates(runner: RetryRunner, mock_sleep: Mock) -> None:
    """Test that KeyboardInterrupt is never caught by the retry loop."""
    operation = Mock(side_effect=KeyboardInterrupt)

    with pytest.raises(KeyboardInterrupt):
        runner.run(operation)

    operation.assert_called_once()
    mock_sleep.assert_not_called()


def test_run_keyboard_interrupt_during_wait_propagates(mock_sleep: Mock) -> None:
    mock_sleep.side_effect = KeyboardInterrupt
    runner = RetryRunner(RetryPolicy(max_attempts=3, delay=10.0), sleep=mock_sleep)

    with pytest.raises(KeyboardInterrupt):
        runner.run(Mock(side_effect=ConnectionError("refused")))


###############################
#     Tests for callbacks     #
###############################


def test_run_callbacks_on_success_after_retry(mock_sleep: Mock) -> None:
    on_attempt, on_retry, on_success, on_failure = Mock(), Mock(), Mock(), Mock()
    runner = RetryRunner(
        RetryPolicy(max_attempts=3, delay=10.0),
        sleep=mock_sleep,
        callbacks=CallbackConfig(
            on_attempt=on_attempt, on_retry=on_retry, on_success=on_success, on_failure=on_failure
        ),
    )
    error = ConnectionError("refused")

    runner.run(Mock(side_effect=[error, "ok"]), description="update student")

    assert on_attempt.call_args_list[0].args[0] == AttemptInfo("update student", 1, 3)
    assert on_attempt.call_args_list[1].args[0] == AttemptInfo("update student", 2, 3)
    on_retry.assert_called_once_with(RetryInfo("update student", 1, 3, 10.0, error))
    on_success.assert_called_once()
    success: SuccessInfo = on_success.call_args.args[0]
    assert success.attempt == 2
    assert success.total_time >= 0
    on_failure.assert_not_called()


def test_run_callbacks_on_failure(mock_sleep: Mock) -> None:
    on_failure = Mock()
    runner = RetryRunner(
        RetryPolicy(max_attempts=2, delay=1.0),
        sleep=mock_sleep,
        callbacks=CallbackConfig(on_failure=on_failure),
    )

    with pytest.raises(RetriesExhaustedError) as exc_info:
        runner.run(Mock(side_effect=ConnectionError("refused")), description="delete student")

    failure: FailureInfo = on_failure.call_args.args[0]
    assert failure.description == "delete student"
    assert failure.attempt == 2
    assert failure.max_attempts == 2
    assert failure.error is exc_info.value
