r"""Shared test helpers: an in-memory student service.

``FakeStudentService`` implements the student service contract on top
of ``httpx.MockTransport`` so that the client, the runner and the
scenario can be exercised without a network.
"""

from __future__ import annotations

__all__ = ["BASE_URL", "FakeStudentService", "make_client"]

import json
import re
from collections import defaultdict
from typing import Any

import httpx

from crudprobe.client import StudentServiceClient

BASE_URL = "http://students.test"

_STUDENT_PATH = re.compile(r"^/students/(?P<id>[^/]+)$")


class FakeStudentService:
    """In-memory student service.

    Attributes:
        students: Stored students by identifier.
        requests: Every request received, in order.
        unhealthy_checks: Number of health checks answered with 503
            before the service reports ready.
        failures: Per ``"METHOD /path"`` key, the number of upcoming
            requests answered with 503.
        errors: Per ``"METHOD /path"`` key, the number of upcoming
            requests that raise ``httpx.ConnectError``.
        numeric_ids: If True, ids are returned as JSON numbers.
    """

    def __init__(self, unhealthy_checks: int = 0, numeric_ids: bool = False) -> None:
        self.students: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.unhealthy_checks = unhealthy_checks
        self.failures: dict[str, int] = defaultdict(int)
        self.errors: dict[str, int] = defaultdict(int)
        self.numeric_ids = numeric_ids
        self._next_id = 1

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, method: str, path: str) -> int:
        return sum(
            1 for request in self.requests if request.method == method and request.url.path == path
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.method} {request.url.path}"
        if self.errors[key] > 0:
            self.errors[key] -= 1
            msg = "Connection refused"
            raise httpx.ConnectError(msg, request=request)
        if self.failures[key] > 0:
            self.failures[key] -= 1
            return httpx.Response(503, json={"error": "Service unavailable"})

        path = request.url.path
        if path == "/actuator/health" and request.method == "GET":
            return self._health()
        if path == "/students" and request.method == "POST":
            return self._create(request)
        match = _STUDENT_PATH.match(path)
        if match is not None:
            student_id = match.group("id")
            if request.method == "GET":
                return self._get(student_id)
            if request.method == "PUT":
                return self._update(student_id, request)
            if request.method == "DELETE":
                return self._delete(student_id)
        return httpx.Response(404, json={"error": "Not found"})

    def _health(self) -> httpx.Response:
        if self.unhealthy_checks > 0:
            self.unhealthy_checks -= 1
            return httpx.Response(503, json={"status": "DOWN"})
        return httpx.Response(200, json={"status": "UP"})

    def _create(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        student_id = str(self._next_id)
        self._next_id += 1
        returned_id: str | int = int(student_id) if self.numeric_ids else student_id
        self.students[student_id] = {"id": returned_id, **payload}
        return httpx.Response(200, json=self.students[student_id])

    def _get(self, student_id: str) -> httpx.Response:
        if student_id not in self.students:
            return httpx.Response(404, json={"error": "Student not found"})
        return httpx.Response(200, json=self.students[student_id])

    def _update(self, student_id: str, request: httpx.Request) -> httpx.Response:
        if student_id not in self.students:
            return httpx.Response(404, json={"error": "Student not found"})
        self.students[student_id].update(json.loads(request.content))
        return httpx.Response(200, json=self.students[student_id])

    def _delete(self, student_id: str) -> httpx.Response:
        if self.students.pop(student_id, None) is None:
            return httpx.Response(404, json={"error": "Student not found"})
        return httpx.Response(204)


def make_client(
    service: FakeStudentService | None = None,
    handler: Any = None,
    base_url: str = BASE_URL,
) -> StudentServiceClient:
    """Create a client whose requests go to ``service`` or ``handler``."""
    transport = httpx.MockTransport(handler) if handler is not None else service.transport
    return StudentServiceClient(base_url, client=httpx.Client(transport=transport))
