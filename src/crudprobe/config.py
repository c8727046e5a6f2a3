r"""Default configuration and base URL resolution.

The base URL of the service under test is resolved, in order of
precedence, from an explicit override, the ``QA_URL`` environment
variable, and finally ``DEFAULT_BASE_URL``.
"""

from __future__ import annotations

__all__ = [
    "BASE_URL_ENV_VAR",
    "DEFAULT_BASE_URL",
    "DEFAULT_DELAY",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_TIMEOUT",
    "FALLBACK_STUDENT_ID",
    "HEALTH_PATH",
    "resolve_base_url",
]

import logging
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

logger: logging.Logger = logging.getLogger(__name__)

# Local QA deployment of the student service
DEFAULT_BASE_URL = "http://localhost:8082"

BASE_URL_ENV_VAR = "QA_URL"

# Total attempts per guarded call, including the first one
DEFAULT_MAX_ATTEMPTS = 5

# Fixed wait in seconds between two attempts
DEFAULT_DELAY = 10.0

# Per-request timeout in seconds passed to httpx
DEFAULT_TIMEOUT = 10.0

HEALTH_PATH = "/actuator/health"

# Used by the scenario when the create step never succeeds
FALLBACK_STUDENT_ID = "test-id-123"


def resolve_base_url(
    override: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Resolve the base URL of the service under test.

    Args:
        override: Explicit base URL, e.g. from a command line option.
            Takes precedence when non-empty.
        environ: Environment mapping to read ``QA_URL`` from.
            Defaults to ``os.environ``.

    Returns:
        The base URL without a trailing slash.

    Example:
        ```pycon
        >>> from crudprobe.config import resolve_base_url
        >>> resolve_base_url("http://qa.internal:9000/", environ={})
        'http://qa.internal:9000'
        >>> resolve_base_url(environ={"QA_URL": "http://ci:8080"})
        'http://ci:8080'
        >>> resolve_base_url(environ={})
        'http://localhost:8082'

        ```
    """
    if environ is None:
        environ = os.environ

    if override:
        source, url = "override", override
    elif environ.get(BASE_URL_ENV_VAR):
        source, url = BASE_URL_ENV_VAR, environ[BASE_URL_ENV_VAR]
    else:
        source, url = "default", DEFAULT_BASE_URL

    url = url.rstrip("/")
    logger.debug(f"Resolved base URL {url} from {source}")
    return url
