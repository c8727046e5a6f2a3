r"""Dispatch of retry lifecycle events to the configured callbacks."""

from __future__ import annotations

__all__ = ["CallbackManager"]

import time
from typing import TYPE_CHECKING

from crudprobe.callbacks import AttemptInfo, FailureInfo, RetryInfo, SuccessInfo

if TYPE_CHECKING:
    from crudprobe.retry.config import CallbackConfig


class CallbackManager:
    """Manages callback invocations during the retry lifecycle.

    Attempt numbers passed to the methods are 0-indexed; the callbacks
    receive them 1-indexed.

    Args:
        callbacks: The callbacks to invoke. Missing ones are skipped.
    """

    def __init__(self, callbacks: CallbackConfig) -> None:
        self.callbacks = callbacks

    def on_attempt(self, description: str, attempt: int, max_attempts: int) -> None:
        if self.callbacks.on_attempt:
            self.callbacks.on_attempt(
                AttemptInfo(description=description, attempt=attempt + 1, max_attempts=max_attempts)
            )

    def on_retry(
        self,
        description: str,
        attempt: int,
        max_attempts: int,
        wait_time: float,
        error: Exception,
    ) -> None:
        if self.callbacks.on_retry:
            self.callbacks.on_retry(
                RetryInfo(
                    description=description,
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                    wait_time=wait_time,
                    error=error,
                )
            )

    def on_success(
        self, description: str, attempt: int, max_attempts: int, start_time: float
    ) -> None:
        if self.callbacks.on_success:
            self.callbacks.on_success(
                SuccessInfo(
                    description=description,
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                    total_time=time.time() - start_time,
                )
            )

    def on_failure(
        self,
        description: str,
        attempt: int,
        max_attempts: int,
        error: Exception,
        start_time: float,
    ) -> None:
        """Invoke on_failure callback.

        Args:
            description: Short name of the guarded operation.
            attempt: Final attempt number (0-indexed).
            max_attempts: Total number of attempts allowed.
            error: The error about to be raised to the caller.
            start_time: When the retry loop started.
        """
        if self.callbacks.on_failure:
            self.callbacks.on_failure(
                FailureInfo(
                    description=description,
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                    error=error,
                    total_time=time.time() - start_time,
                )
            )
