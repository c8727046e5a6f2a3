r"""Bounded retry of single-shot operations and the readiness gate."""

from __future__ import annotations

__all__ = ["RetryRunner"]

import logging
import threading
import time
from typing import TYPE_CHECKING, TypeVar

from crudprobe.config import HEALTH_PATH
from crudprobe.exceptions import (
    RetriesExhaustedError,
    RetryInterruptedError,
    ServiceNotReadyError,
)
from crudprobe.outcome import AttemptOutcome
from crudprobe.retry.config import CallbackConfig, RetryPolicy
from crudprobe.retry.decider import RetryDecider
from crudprobe.retry.manager import CallbackManager
from crudprobe.utils.sleep import interruptible_sleep

if TYPE_CHECKING:
    from collections.abc import Callable

    from crudprobe.client import StudentServiceClient

T = TypeVar("T")

logger: logging.Logger = logging.getLogger(__name__)


class RetryRunner:
    """Runs zero-argument operations with bounded retries.

    An operation fails when it raises an ``Exception`` or returns a
    failed ``AttemptOutcome``, whose error is then handled as if it
    had been raised. Any other return value is a success. Failed attempts
    are followed by a fixed wait, except after the last one, which raises
    ``RetriesExhaustedError``.

    The wait can be cancelled from another thread with ``cancel()``.
    Cancellation raises ``RetryInterruptedError`` and the runner stays
    cancelled, so every later wait is interrupted too. Exceptions that
    are not ``Exception`` subclasses, such as ``KeyboardInterrupt``,
    are never caught.

    Args:
        policy: Default policy for every call. If ``None``,
            ``RetryPolicy()`` is used.
        sleep: Optional sleep function used for the wait instead of
            ``threading.Event.wait``.
        cancel_event: Optional event shared with whoever cancels the
            run. A new one is created if ``None``.
        callbacks: Optional lifecycle callbacks.

    Example:
        ```pycon
        >>> from crudprobe.retry import RetryPolicy, RetryRunner
        >>> runner = RetryRunner(RetryPolicy(max_attempts=3, delay=0.0))
        >>> attempts = []
        >>> def flaky():
        ...     attempts.append(1)
        ...     if len(attempts) < 2:
        ...         raise ConnectionError("refused")
        ...     return "ok"
        ...
        >>> runner.run(flaky, description="flaky call")
        'ok'
        >>> len(attempts)
        2

        ```
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], object] | None = None,
        cancel_event: threading.Event | None = None,
        callbacks: CallbackConfig | None = None,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self.cancel_event = cancel_event or threading.Event()
        self.callbacks = CallbackManager(callbacks or CallbackConfig())
        self._sleep = sleep

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Interrupt the current wait and every later one."""
        self.cancel_event.set()

    def run(
        self,
        operation: Callable[[], T],
        *,
        policy: RetryPolicy | None = None,
        description: str = "operation",
    ) -> T:
        """Run ``operation`` until it returns or the policy gives up.

        Args:
            operation: Zero-argument callable performing one attempt. It
                may raise or return a failed ``AttemptOutcome`` to fail.
            policy: Optional policy overriding the runner default for
                this call only.
            description: Short name used in logs and errors.

        Returns:
            The value returned by the first successful attempt.

        Raises:
            RetriesExhaustedError: If every attempt failed. Its
                ``last_error`` is the failure of the final attempt.
            RetryInterruptedError: If a wait was cancelled.
            Exception: A failure rejected by ``policy.retry_if`` is
                re-raised unchanged.
        """
        policy = policy or self.policy
        decider = RetryDecider(policy)
        max_attempts = policy.max_attempts
        start_time = time.time()

        for attempt in range(max_attempts):
            self.callbacks.on_attempt(description, attempt, max_attempts)
            try:
                result = operation()
                if isinstance(result, AttemptOutcome):
                    result.unwrap()
            except Exception as exc:
                should_retry, reason = decider.should_retry(exc, attempt)
                if not should_retry:
                    if not decider.is_retryable(exc):
                        logger.debug(
                            f"{description} failed with non-retryable "
                            f"{type(exc).__name__} on attempt {attempt + 1}/{max_attempts}"
                        )
                        self.callbacks.on_failure(description, attempt, max_attempts, exc, start_time)
                        raise
                    error = RetriesExhaustedError(description, attempt + 1, exc)
                    logger.debug(f"{description} failed after {attempt + 1} attempts: {exc}")
                    self.callbacks.on_failure(description, attempt, max_attempts, error, start_time)
                    raise error from exc

                logger.warning(
                    f"Attempt {attempt + 1}/{max_attempts} of {description} failed "
                    f"({reason}: {exc}). Retrying in {policy.delay:g} seconds..."
                )
                self.callbacks.on_retry(description, attempt, max_attempts, policy.delay, exc)
                if interruptible_sleep(policy.delay, self.cancel_event, self._sleep):
                    interrupted = RetryInterruptedError(description, attempt + 1, exc)
                    logger.debug(f"{description} interrupted after {attempt + 1} attempts")
                    self.callbacks.on_failure(
                        description, attempt, max_attempts, interrupted, start_time
                    )
                    raise interrupted from exc
            else:
                if attempt > 0:
                    logger.debug(f"{description} succeeded on attempt {attempt + 1}")
                self.callbacks.on_success(description, attempt, max_attempts, start_time)
                return result

        # max_attempts >= 1, so the loop always returns or raises
        msg = f"{description} made no attempt"  # pragma: no cover
        raise RuntimeError(msg)  # pragma: no cover

    def await_ready(
        self,
        client: StudentServiceClient,
        *,
        path: str = HEALTH_PATH,
        policy: RetryPolicy | None = None,
    ) -> AttemptOutcome:
        """Block until the health endpoint answers 200.

        Args:
            client: Client pointing at the service under test.
            path: Path of the health endpoint.
            policy: Optional policy overriding the runner default.

        Returns:
            The successful outcome of the health check.

        Raises:
            ServiceNotReadyError: If the health check never succeeded.
            RetryInterruptedError: If a wait was cancelled.
        """
        logger.info(f"Waiting for {client.base_url}{path} to report ready")
        try:
            outcome = self.run(
                lambda: client.get(path, expected_status=200),
                policy=policy,
                description=f"readiness check {path}",
            )
        except RetriesExhaustedError as exc:
            error = ServiceNotReadyError(exc.description, exc.attempts, exc.last_error)
            raise error from exc.last_error
        logger.info(f"{client.base_url} is ready")
        return outcome
