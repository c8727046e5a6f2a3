from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock

import pytest

from crudprobe.retry import RetryPolicy, RetryRunner
from tests.helpers import FakeStudentService, make_client

if TYPE_CHECKING:
    from collections.abc import Generator

    from crudprobe.client import StudentServiceClient


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--service-url",
        action="store",
        default=None,
        help="Base URL of a deployed student service for the live tests",
    )


@pytest.fixture
def mock_sleep() -> Mock:
    """Sleep function that returns at once and records its calls."""
    return Mock(return_value=None)


@pytest.fixture
def runner(mock_sleep: Mock) -> RetryRunner:
    """Create a runner with 5 attempts and a mocked 10 second delay."""
    return RetryRunner(RetryPolicy(max_attempts=5, delay=10.0), sleep=mock_sleep)


@pytest.fixture
def service() -> FakeStudentService:
    return FakeStudentService()


@pytest.fixture
def client(service: FakeStudentService) -> Generator[StudentServiceClient, None, None]:
    """Create a client connected to the in-memory student service."""
    with make_client(service) as client:
        yield client
