r"""Exception hierarchy for crudprobe.

Three exceptions describe why a single HTTP attempt failed
(``TransportError``, ``StatusMismatchError``, ``BodyAssertionError``).
Two more describe how a retry loop ended without success
(``RetriesExhaustedError``, ``RetryInterruptedError``).
"""

from __future__ import annotations

__all__ = [
    "BodyAssertionError",
    "CrudProbeError",
    "HttpAttemptError",
    "RetriesExhaustedError",
    "RetryInterruptedError",
    "ServiceNotReadyError",
    "StatusMismatchError",
    "TransportError",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class CrudProbeError(Exception):
    """Base class for all crudprobe errors."""


class HttpAttemptError(CrudProbeError):
    """Raised when one HTTP attempt does not produce a valid response.

    Args:
        method: The HTTP method name (e.g., "GET", "POST").
        url: The URL that was requested.
        message: Human-readable description of the failure.
        status_code: The HTTP status code, if a response was received.
        response: The HTTP response, if one was received.
        cause: The underlying exception, if any.

    Example:
        ```pycon
        >>> from crudprobe.exceptions import HttpAttemptError
        >>> error = HttpAttemptError(
        ...     method="GET", url="http://localhost:8082/students/1", message="boom"
        ... )
        >>> error.method
        'GET'
        >>> str(error)
        'boom'

        ```
    """

    def __init__(
        self,
        method: str,
        url: str,
        message: str,
        status_code: int | None = None,
        response: httpx.Response | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code
        self.response = response
        if cause is not None:
            self.__cause__ = cause


class TransportError(HttpAttemptError):
    """Raised on connection failures, timeouts and unreadable bodies."""


class StatusMismatchError(HttpAttemptError):
    """Raised when the response status differs from the expected one.

    Args:
        method: The HTTP method name.
        url: The URL that was requested.
        expected_status: The status code the request spec expected.
        response: The HTTP response that was received.
    """

    def __init__(
        self,
        method: str,
        url: str,
        expected_status: int,
        response: httpx.Response,
    ) -> None:
        super().__init__(
            method=method,
            url=url,
            message=(
                f"{method} request to {url} returned status {response.status_code}, "
                f"expected {expected_status}"
            ),
            status_code=response.status_code,
            response=response,
        )
        self.expected_status = expected_status


class BodyAssertionError(HttpAttemptError):
    """Raised when a field of the JSON body does not match its
    assertion.

    Args:
        method: The HTTP method name.
        url: The URL that was requested.
        field: The dotted path of the field that did not match.
        expected: Description of the expected value.
        actual: The value found in the body, or ``None`` if missing.
        response: The HTTP response that was received.
    """

    def __init__(
        self,
        method: str,
        url: str,
        field: str,
        expected: str,
        actual: Any,
        response: httpx.Response,
    ) -> None:
        super().__init__(
            method=method,
            url=url,
            message=(
                f"{method} request to {url}: body field '{field}' expected "
                f"{expected}, got {actual!r}"
            ),
            status_code=response.status_code,
            response=response,
        )
        self.field = field
        self.expected = expected
        self.actual = actual


class RetriesExhaustedError(CrudProbeError):
    """Raised when every attempt of a guarded operation failed.

    The last underlying failure is available as ``last_error`` and is
    also chained as ``__cause__``.

    Args:
        description: Short name of the guarded operation.
        attempts: Number of attempts that were made.
        last_error: The failure raised by the final attempt.
    """

    def __init__(self, description: str, attempts: int, last_error: Exception) -> None:
        super().__init__(f"{description} failed after {attempts} attempts: {last_error}")
        self.description = description
        self.attempts = attempts
        self.last_error = last_error
        self.__cause__ = last_error


class ServiceNotReadyError(RetriesExhaustedError):
    """Raised when the readiness probe never succeeded."""


class RetryInterruptedError(CrudProbeError):
    """Raised when the wait between two attempts is cancelled.

    Args:
        description: Short name of the guarded operation.
        attempts: Number of attempts made before the cancellation.
        last_error: The failure that triggered the interrupted wait.
    """

    def __init__(
        self, description: str, attempts: int, last_error: Exception | None = None
    ) -> None:
        super().__init__(f"{description} interrupted after {attempts} attempts")
        self.description = description
        self.attempts = attempts
        self.last_error = last_error
