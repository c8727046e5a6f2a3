r"""Parameter validation utilities for the client and the retry
runner.
"""

from __future__ import annotations

__all__ = ["validate_retry_params", "validate_timeout"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


def validate_timeout(timeout: float | httpx.Timeout) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for server responses.
            Must be > 0 if provided as a numeric value.

    Raises:
        ValueError: If timeout is a numeric value <= 0.

    Example:
        ```pycon
        >>> from crudprobe.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(0)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if isinstance(timeout, (int, float)) and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry_params(max_attempts: int, delay: float) -> None:
    """Validate retry parameters.

    Args:
        max_attempts: Total number of attempts, including the first one.
            Must be >= 1.
        delay: Fixed wait in seconds between two attempts. Must be >= 0.

    Raises:
        ValueError: If max_attempts is below 1 or delay is negative.

    Example:
        ```pycon
        >>> from crudprobe.core import validate_retry_params
        >>> validate_retry_params(max_attempts=5, delay=10.0)
        >>> validate_retry_params(max_attempts=1, delay=0.0)
        >>> validate_retry_params(max_attempts=0, delay=1.0)  # doctest: +SKIP

        ```
    """
    if max_attempts < 1:
        msg = f"max_attempts must be >= 1, got {max_attempts}"
        raise ValueError(msg)
    if delay < 0:
        msg = f"delay must be >= 0, got {delay}"
        raise ValueError(msg)
