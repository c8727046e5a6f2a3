r"""Utility functions for logging and waiting between attempts."""

from __future__ import annotations

__all__ = [
    "StructuredFormatter",
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "interruptible_sleep",
    "log_structured",
    "set_correlation_id",
]

from crudprobe.utils.sleep import interruptible_sleep
from crudprobe.utils.structured_logging import (
    StructuredFormatter,
    clear_correlation_id,
    configure_logging,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)
