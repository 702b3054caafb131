"""Bounded retry with a fixed delay between attempts."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from npm_generator.core.errors import CollaboratorError

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_DELAY_SECONDS = 1.0


def _is_transient(exc: CollaboratorError) -> bool:
    """Client errors (4xx) will not change on retry."""
    return exc.status_code is None or exc.status_code >= 500


def with_retries(
    operation: Callable[[], T],
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    delay: float = DEFAULT_DELAY_SECONDS,
    on_error: Callable[[CollaboratorError, int], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``operation`` up to ``attempts`` times.

    Only ``CollaboratorError`` is retried; anything else propagates
    immediately. Non-transient errors (HTTP 4xx) are not retried.

    Args:
        operation: Zero-argument callable to run
        attempts: Maximum number of attempts (>= 1)
        delay: Seconds to wait between attempts
        on_error: Called with (error, attempt_number) after each failure
        sleep: Sleep function (injectable for tests)

    Returns:
        The operation's return value

    Raises:
        CollaboratorError: The last error, once attempts are exhausted
    """
    attempt = 1
    while True:
        try:
            return operation()
        except CollaboratorError as exc:
            if on_error is not None:
                on_error(exc, attempt)
            if not _is_transient(exc) or attempt >= attempts:
                raise
        sleep(delay)
        attempt += 1
