r"""Configuration dataclasses for retry behavior.

This module provides configuration objects for retry logic and
callbacks.
"""

from __future__ import annotations

__all__ = ["CallbackConfig", "RetryPolicy"]

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from crudprobe.config import DEFAULT_DELAY, DEFAULT_MAX_ATTEMPTS
from crudprobe.core.validation import validate_retry_params

if TYPE_CHECKING:
    from collections.abc import Callable

    from crudprobe.callbacks import AttemptInfo, FailureInfo, RetryInfo, SuccessInfo


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with a fixed delay between attempts.

    Every failure is retried unless ``retry_if`` is given and returns
    False for it, in which case the failure is raised at once.

    Attributes:
        max_attempts: Total number of attempts, including the first one.
            Must be >= 1.
        delay: Fixed wait in seconds between two attempts. Must be >= 0.
        retry_if: Optional predicate called with the failure of an
            attempt. Returning False stops the retry loop.

    Example:
        ```pycon
        >>> from crudprobe.retry import RetryPolicy
        >>> policy = RetryPolicy()
        >>> policy.max_attempts, policy.delay
        (5, 10.0)
        >>> policy.merge(delay=0.5).delay
        0.5

        ```
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay: float = DEFAULT_DELAY
    retry_if: Callable[[Exception], bool] | None = None

    def __post_init__(self) -> None:
        validate_retry_params(max_attempts=self.max_attempts, delay=self.delay)

    def merge(self, **overrides: Any) -> RetryPolicy:
        """Create a new policy with the non-None overrides applied."""
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    @property
    def worst_case_wait(self) -> float:
        """Total time spent waiting when every attempt fails."""
        return (self.max_attempts - 1) * self.delay


@dataclass
class CallbackConfig:
    """Configuration for callbacks.

    Attributes:
        on_attempt: Optional callback invoked before each attempt.
        on_retry: Optional callback invoked before each wait.
        on_success: Optional callback invoked when an attempt succeeds.
        on_failure: Optional callback invoked when the loop gives up.
    """

    on_attempt: Callable[[AttemptInfo], None] | None = None
    on_retry: Callable[[RetryInfo], None] | None = None
    on_success: Callable[[SuccessInfo], None] | None = None
    on_failure: Callable[[FailureInfo], None] | None = None
