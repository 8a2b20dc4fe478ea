"""Retry decision logic and backoff computation.

Pure functions used by :class:`~notionpipe.notion_api.executor.RetryingExecutor`:

* :func:`should_retry` -- decide whether a classified failure gets another
  attempt.
* :func:`compute_backoff` -- exponential delay for attempt *n* (1-indexed).
* :func:`retry_delay` -- the wait before the next attempt, preferring a
  server-directed ``Retry-After`` over the exponential schedule.
"""

from __future__ import annotations

import random

from notionpipe.errors import NotionPipeError


def should_retry(error: NotionPipeError, attempt: int, max_attempts: int) -> bool:
    """Return ``True`` if *error* is retryable and budget remains.

    *attempt* is the 1-indexed number of the attempt that just failed.
    """
    return error.retryable and attempt < max_attempts


def compute_backoff(attempt: int, base: float = 1.0, jitter: bool = False) -> float:
    """Delay in seconds after the failed 1-indexed *attempt*.

    Follows ``base * 2 ** (attempt - 1)``.  With *jitter* the delay is
    randomly scaled to between 50 % and 100 % of that value.
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")
    delay = base * (2 ** (attempt - 1))
    if jitter:
        delay *= 0.5 + random.random() * 0.5
    return delay


def retry_delay(
    error: NotionPipeError,
    attempt: int,
    *,
    base: float = 1.0,
    jitter: bool = False,
    retry_after_max: float | None = None,
) -> float:
    """Wait before retrying after *error* on the 1-indexed *attempt*.

    A ``retry_after`` carried by the error wins (capped at *retry_after_max*
    when given); otherwise the exponential schedule applies.  A rate-limit
    response without ``Retry-After`` therefore still backs off.
    """
    if error.retry_after is not None:
        if retry_after_max is not None:
            return min(error.retry_after, retry_after_max)
        return error.retry_after
    return compute_backoff(attempt, base=base, jitter=jitter)
