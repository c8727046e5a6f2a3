r"""Callback types for observing the retry lifecycle.

The retry runner exposes four hooks:
- on_attempt: Called before each attempt
- on_retry: Called after a failed attempt, before the wait
- on_success: Called when an attempt succeeds
- on_failure: Called when the retry loop gives up

Example:
    ```pycon
    >>> from crudprobe.callbacks import RetryInfo
    >>> from crudprobe.retry import CallbackConfig, RetryRunner
    >>> def log_retry(info: RetryInfo) -> None:
    ...     print(f"Attempt {info.attempt} failed, retrying in {info.wait_time}s")
    ...
    >>> runner = RetryRunner(callbacks=CallbackConfig(on_retry=log_retry))

    ```
"""

from __future__ import annotations

__all__ = ["AttemptInfo", "FailureInfo", "RetryInfo", "SuccessInfo"]

from dataclasses import dataclass


@dataclass
class AttemptInfo:
    """Information passed to on_attempt callback.

    Attributes:
        description: Short name of the guarded operation.
        attempt: The attempt about to run (1-indexed).
        max_attempts: Total number of attempts allowed.
    """

    description: str
    attempt: int
    max_attempts: int


@dataclass
class RetryInfo:
    """Information passed to on_retry callback.

    Attributes:
        description: Short name of the guarded operation.
        attempt: The attempt that just failed (1-indexed).
        max_attempts: Total number of attempts allowed.
        wait_time: Seconds the runner will wait before the next attempt.
        error: The failure raised by the attempt.
    """

    description: str
    attempt: int
    max_attempts: int
    wait_time: float
    error: Exception


@dataclass
class SuccessInfo:
    """Information passed to on_success callback.

    Attributes:
        description: Short name of the guarded operation.
        attempt: The attempt that succeeded (1-indexed).
        max_attempts: Total number of attempts allowed.
        total_time: Seconds spent on all attempts including waits.
    """

    description: str
    attempt: int
    max_attempts: int
    total_time: float


@dataclass
class FailureInfo:
    """Information passed to on_failure callback.

    Attributes:
        description: Short name of the guarded operation.
        attempt: The final attempt number (1-indexed).
        max_attempts: Total number of attempts allowed.
        error: The error the runner raises to its caller.
        total_time: Seconds spent on all attempts including waits.
    """

    description: str
    attempt: int
    max_attempts: int
    error: Exception
    total_time: float
