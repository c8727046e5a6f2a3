r"""Retry package: bounded retry with a fixed delay.

Public API:
    - RetryPolicy: Maximum attempts, fixed delay, optional classifier
    - CallbackConfig: Configuration for callbacks
    - RetryDecider: Logic for deciding whether to retry
    - CallbackManager: Manager for callback invocations
    - RetryRunner: Runs operations with retries, provides the readiness gate
"""

from __future__ import annotations

__all__ = [
    "CallbackConfig",
    "CallbackManager",
    "RetryDecider",
    "RetryPolicy",
    "RetryRunner",
]

from crudprobe.retry.config import CallbackConfig, RetryPolicy
from crudprobe.retry.decider import RetryDecider
from crudprobe.retry.manager import CallbackManager
from crudprobe.retry.runner import RetryRunner
