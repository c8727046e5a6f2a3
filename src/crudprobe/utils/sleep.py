r"""Interruptible wait between two attempts."""

from __future__ import annotations

__all__ = ["interruptible_sleep"]

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)


def interruptible_sleep(
    delay: float,
    cancel_event: threading.Event,
    sleep: Callable[[float], object] | None = None,
) -> bool:
    """Wait for ``delay`` seconds unless ``cancel_event`` is set.

    The event is never cleared here, so a cancellation stays visible to
    the caller after this function returns.

    Args:
        delay: Seconds to wait. Must be >= 0.
        cancel_event: Event that interrupts the wait when set.
        sleep: Optional sleep function used instead of waiting on the
            event. The event is checked after it returns.

    Returns:
        True if the wait was interrupted, False if it completed.

    Example:
        ```pycon
        >>> import threading
        >>> from crudprobe.utils.sleep import interruptible_sleep
        >>> event = threading.Event()
        >>> interruptible_sleep(0.0, event)
        False
        >>> event.set()
        >>> interruptible_sleep(5.0, event)
        True

        ```
    """
    if cancel_event.is_set():
        return True
    logger.debug(f"Waiting {delay:.2f}s before retry")
    if sleep is not None:
        sleep(delay)
        return cancel_event.is_set()
    return cancel_event.wait(delay)
