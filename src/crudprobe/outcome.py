r"""Result of a single HTTP attempt."""

from __future__ import annotations

__all__ = ["AttemptOutcome"]

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx

    from crudprobe.exceptions import HttpAttemptError


@dataclass(frozen=True)
class AttemptOutcome:
    """Either a fully validated response or the cause of a failure.

    Use ``AttemptOutcome.success`` and ``AttemptOutcome.failure`` to
    build instances; an outcome never carries both a body and an error.

    Attributes:
        status_code: The response status code, if a response arrived.
        body: The parsed JSON body of a successful response, ``None``
            for an empty body.
        response: The raw HTTP response, if one arrived.
        error: The failure cause, ``None`` on success.
    """

    status_code: int | None = None
    body: Any = None
    response: httpx.Response | None = None
    error: HttpAttemptError | None = None

    @classmethod
    def success(cls, response: httpx.Response, body: Any) -> AttemptOutcome:
        return cls(status_code=response.status_code, body=body, response=response)

    @classmethod
    def failure(cls, error: HttpAttemptError) -> AttemptOutcome:
        return cls(status_code=error.status_code, response=error.response, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> AttemptOutcome:
        """Return this outcome if it is a success, else raise its cause.

        Raises:
            HttpAttemptError: The failure cause of this outcome.
        """
        if self.error is not None:
            raise self.error
        return self
