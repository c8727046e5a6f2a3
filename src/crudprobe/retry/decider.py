r"""Retry decision logic for failed attempts.

This module provides the RetryDecider class that encapsulates the logic
for deciding whether a failed attempt should be retried.
"""

from __future__ import annotations

__all__ = ["RetryDecider"]

import logging
from typing import TYPE_CHECKING

from crudprobe.exceptions import RetryInterruptedError

if TYPE_CHECKING:
    from crudprobe.retry.config import RetryPolicy

logger: logging.Logger = logging.getLogger(__name__)


class RetryDecider:
    """Decides whether a failed attempt should be retried.

    Without a ``retry_if`` predicate on the policy every failure is
    retryable, transport errors and assertion failures alike.
    """

    def __init__(self, policy: RetryPolicy) -> None:
        self.policy = policy

    def is_retryable(self, error: Exception) -> bool:
        """Return True unless the failure must be raised at once."""
        if isinstance(error, RetryInterruptedError):
            return False
        if self.policy.retry_if is not None and not self.policy.retry_if(error):
            logger.debug(f"retry_if returned False for {type(error).__name__}")
            return False
        return True

    def should_retry(self, error: Exception, attempt: int) -> tuple[bool, str]:
        """Determine if a failed attempt should trigger another one.

        Args:
            error: The failure raised by the attempt.
            attempt: Current attempt number (0-indexed).

        Returns:
            Tuple of (should_retry, reason).
        """
        if not self.is_retryable(error):
            return (False, "not retryable")
        if attempt + 1 >= self.policy.max_attempts:
            return (False, "max attempts exhausted")
        return (True, type(error).__name__)
