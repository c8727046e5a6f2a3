r"""crudprobe - Retrying integration test runner for a student CRUD
service.

The package sends single-shot HTTP requests whose responses are checked
against an expected status and field assertions, retries each guarded
call with a fixed delay, and runs the student lifecycle scenario
(create, read, update, read, delete, read) behind a readiness gate.

Example:
    ```pycon
    >>> from crudprobe import RetryPolicy, RetryRunner, StudentServiceClient
    >>> from crudprobe.scenario import ScenarioDriver, student_crud_steps
    >>> runner = RetryRunner(RetryPolicy(max_attempts=5, delay=10.0))
    >>> with StudentServiceClient("http://localhost:8082") as client:  # doctest: +SKIP
    ...     report = ScenarioDriver(student_crud_steps()).run(client, runner)
    ...     report.ok
    ...

    ```
"""

from __future__ import annotations

__all__ = [
    "AttemptOutcome",
    "BodyAssertionError",
    "CrudProbeError",
    "FieldAssertion",
    "HttpAttemptError",
    "RequestSpec",
    "RetriesExhaustedError",
    "RetryInterruptedError",
    "RetryPolicy",
    "RetryRunner",
    "ServiceNotReadyError",
    "StatusMismatchError",
    "StudentServiceClient",
    "TransportError",
    "__version__",
    "equal_to",
    "not_null",
    "resolve_base_url",
]

from importlib.metadata import PackageNotFoundError, version

from crudprobe.assertions import FieldAssertion, equal_to, not_null
from crudprobe.client import StudentServiceClient
from crudprobe.config import resolve_base_url
from crudprobe.exceptions import (
    BodyAssertionError,
    CrudProbeError,
    HttpAttemptError,
    RetriesExhaustedError,
    RetryInterruptedError,
    ServiceNotReadyError,
    StatusMismatchError,
    TransportError,
)
from crudprobe.outcome import AttemptOutcome
from crudprobe.request_spec import RequestSpec
from crudprobe.retry import RetryPolicy, RetryRunner

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
