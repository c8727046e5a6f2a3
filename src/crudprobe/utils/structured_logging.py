r"""Logging setup and structured JSON output.

crudprobe logs through the standard ``logging`` module under the
``crudprobe`` logger. ``configure_logging`` installs a handler on that
logger, either human-readable or JSON via ``StructuredFormatter``.

Every scenario run sets a correlation ID (the run ID) so that all log
records of one run can be grouped in a log aggregation system.

Example:
    ```python
    import logging
    from crudprobe.utils.structured_logging import StructuredFormatter

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    logger = logging.getLogger("crudprobe")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    ```
"""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "log_structured",
    "set_correlation_id",
]

import contextvars
import json
import logging
import sys
import time
from typing import IO, Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

# LogRecord attributes that are not user-supplied extra fields
_RESERVED_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)


def get_correlation_id() -> str | None:
    """Get the current correlation ID, or None if not set.

    Example:
        ```pycon
        >>> from crudprobe.utils.structured_logging import (
        ...     get_correlation_id,
        ...     set_correlation_id,
        ... )
        >>> set_correlation_id("run-123")
        >>> get_correlation_id()
        'run-123'

        ```
    """
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Standard fields in the JSON output:
        - timestamp: ISO 8601 timestamp (UTC, milliseconds)
        - level: Log level name
        - logger: Logger name
        - message: Log message
        - correlation_id: Run ID, if set
        - module, function, line: Where the record originated

    Fields passed through the ``extra`` argument of a logging call are
    added as is.

    Example:
        ```pycon
        >>> import logging
        >>> from io import StringIO
        >>> from crudprobe.utils.structured_logging import StructuredFormatter
        >>> stream = StringIO()
        >>> handler = logging.StreamHandler(stream)
        >>> handler.setFormatter(StructuredFormatter())
        >>> logger = logging.getLogger("doctest_structured")
        >>> logger.addHandler(handler)
        >>> logger.setLevel(logging.INFO)
        >>> logger.info("Step passed", extra={"step": "create"})
        >>> '"step": "create"' in stream.getvalue()
        True

        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = get_correlation_id()
        if correlation_id is not None:
            log_data["correlation_id"] = correlation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: ARG002
        return (
            time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z"
        )


def log_structured(logger: logging.Logger, level: int, message: str, **extra: Any) -> None:
    """Log a message with structured data.

    The extra fields are included in JSON output when using
    ``StructuredFormatter``.

    Example:
        ```pycon
        >>> import logging
        >>> from crudprobe.utils.structured_logging import log_structured
        >>> log_structured(
        ...     logging.getLogger("crudprobe"), logging.INFO, "Step finished", step="delete"
        ... )

        ```
    """
    logger.log(level, message, extra=extra)


def configure_logging(
    verbose: int = 0,
    json_output: bool = False,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Install a single handler on the ``crudprobe`` logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        verbose: 0 logs warnings, 1 logs info, 2 or more logs debug.
        json_output: If True, format records with ``StructuredFormatter``.
        stream: Stream to write to. Defaults to ``sys.stderr``.

    Returns:
        The installed handler.
    """
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_output:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    handler._crudprobe_handler = True  # type: ignore[attr-defined]

    logger = logging.getLogger("crudprobe")
    for existing in list(logger.handlers):
        if getattr(existing, "_crudprobe_handler", False):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
