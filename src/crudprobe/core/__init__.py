r"""Core shared logic: parameter validation."""

from __future__ import annotations

__all__ = ["validate_retry_params", "validate_timeout"]

from crudprobe.core.validation import validate_retry_params, validate_timeout
