r"""Single-shot HTTP client for the student service.

The ``StudentServiceClient`` sends exactly one request per call and
validates the response against a ``RequestSpec``. It never retries;
wrap its calls with ``crudprobe.retry.RetryRunner`` for that.
"""

from __future__ import annotations

__all__ = ["StudentServiceClient"]

import json as jsonlib
import logging
from typing import TYPE_CHECKING, Any

import httpx

from crudprobe.config import DEFAULT_TIMEOUT
from crudprobe.core.validation import validate_timeout
from crudprobe.exceptions import BodyAssertionError, StatusMismatchError, TransportError
from crudprobe.outcome import AttemptOutcome
from crudprobe.request_spec import RequestSpec

if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import TracebackType
    from typing import Self

    from crudprobe.assertions import FieldAssertion

logger: logging.Logger = logging.getLogger(__name__)


class StudentServiceClient:
    r"""Context manager that sends validated requests to a base URL.

    Two usage patterns are supported:

    * pass an ``httpx.Client``; its lifecycle stays with the caller and
      it is not closed on exit;
    * pass nothing; a client is created, entered and closed by this
      context manager.

    Args:
        base_url: The base URL of the service, without trailing slash.
        client: Optional ``httpx.Client`` to send requests with. If
            ``None``, a new client is created with ``timeout``.
        timeout: Timeout in seconds for the default client.

    Example:
        ```pycon
        >>> from crudprobe.client import StudentServiceClient
        >>> with StudentServiceClient("http://localhost:8082") as client:  # doctest: +SKIP
        ...     outcome = client.get("/students/{id}", "42")
        ...     outcome.body["name"]
        ...

        ```
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        validate_timeout(timeout)
        self.base_url = base_url.rstrip("/")
        self._client: httpx.Client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None
        self._close_client = False

    def __enter__(self) -> Self:
        if self._owns_client and not self._close_client:
            self._client.__enter__()
            self._close_client = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._close_client:
            self._client.__exit__(exc_type, exc_val, exc_tb)
            self._close_client = False

    def url_for(self, spec: RequestSpec) -> str:
        return f"{self.base_url}{spec.render_path()}"

    def send(self, spec: RequestSpec) -> AttemptOutcome:
        """Send one request and validate the response.

        The status code is checked first, then every field assertion in
        order. Transport failures, status mismatches and body mismatches
        are reported in the returned outcome, not raised.

        Args:
            spec: Description of the request and its expectations.

        Returns:
            A successful outcome carrying the status and parsed body, or
            a failed outcome carrying a ``TransportError``,
            ``StatusMismatchError`` or ``BodyAssertionError``.
        """
        url = self.url_for(spec)
        kwargs: dict[str, Any] = {}
        if spec.json is not None:
            kwargs["json"] = spec.json

        try:
            response = self._client.request(spec.method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.debug(f"{spec.method} request to {url} timed out: {exc}")
            return AttemptOutcome.failure(
                TransportError(
                    method=spec.method,
                    url=url,
                    message=f"{spec.method} request to {url} timed out",
                    cause=exc,
                )
            )
        except httpx.RequestError as exc:
            error_type = type(exc).__name__
            logger.debug(f"{spec.method} request to {url} encountered {error_type}: {exc}")
            return AttemptOutcome.failure(
                TransportError(
                    method=spec.method,
                    url=url,
                    message=f"{spec.method} request to {url} failed with {error_type}: {exc}",
                    cause=exc,
                )
            )

        if response.status_code != spec.expected_status:
            logger.debug(
                f"{spec.method} request to {url} returned status {response.status_code}, "
                f"expected {spec.expected_status}"
            )
            return AttemptOutcome.failure(
                StatusMismatchError(
                    method=spec.method,
                    url=url,
                    expected_status=spec.expected_status,
                    response=response,
                )
            )

        try:
            body = _parse_body(response)
        except ValueError as exc:
            if spec.assertions:
                return AttemptOutcome.failure(
                    TransportError(
                        method=spec.method,
                        url=url,
                        message=f"{spec.method} request to {url} returned a malformed JSON body",
                        status_code=response.status_code,
                        response=response,
                        cause=exc,
                    )
                )
            logger.debug(f"{spec.method} request to {url} returned a non-JSON body, ignoring it")
            body = None

        for assertion in spec.assertions:
            matched, actual = assertion.check(body)
            if not matched:
                return AttemptOutcome.failure(
                    BodyAssertionError(
                        method=spec.method,
                        url=url,
                        field=assertion.path,
                        expected=assertion.matcher.describe(),
                        actual=actual,
                        response=response,
                    )
                )

        logger.debug(f"{spec.method} request to {url} succeeded with status {response.status_code}")
        return AttemptOutcome.success(response, body)

    def check(self, spec: RequestSpec) -> AttemptOutcome:
        """Send one request and raise if the response is not valid.

        Raises:
            HttpAttemptError: The cause of the failed outcome.
        """
        return self.send(spec).unwrap()

    def request(
        self,
        method: str,
        path: str,
        *path_params: Any,
        json: Any = None,
        expected_status: int = 200,
        assertions: Iterable[FieldAssertion] = (),
    ) -> AttemptOutcome:
        """Build a ``RequestSpec`` from arguments and ``check`` it."""
        spec = RequestSpec(
            method=method,
            path=path,
            path_params=path_params,
            json=json,
            expected_status=expected_status,
            assertions=tuple(assertions),
        )
        return self.check(spec)

    def get(self, path: str, *path_params: Any, **kwargs: Any) -> AttemptOutcome:
        return self.request("GET", path, *path_params, **kwargs)

    def post(self, path: str, *path_params: Any, **kwargs: Any) -> AttemptOutcome:
        return self.request("POST", path, *path_params, **kwargs)

    def put(self, path: str, *path_params: Any, **kwargs: Any) -> AttemptOutcome:
        return self.request("PUT", path, *path_params, **kwargs)

    def delete(self, path: str, *path_params: Any, **kwargs: Any) -> AttemptOutcome:
        return self.request("DELETE", path, *path_params, **kwargs)


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except (jsonlib.JSONDecodeError, UnicodeDecodeError) as exc:
        msg = f"response body is not valid JSON: {exc}"
        raise ValueError(msg) from exc
