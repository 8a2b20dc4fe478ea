"""notionpipe.notion_api -- request pipeline and endpoint wrappers.

This sub-package provides:

* :mod:`.classify` -- Map responses and exceptions to classified errors.
* :mod:`.retries` -- Retry decision and backoff computation.
* :mod:`.executor` -- Per-attempt timeout and bounded retry of one call.
* :mod:`.queue` -- Single-lane FIFO queue with minimum start spacing.
* :mod:`.transport` -- httpx transport wiring the pipeline together.
* :mod:`.pagination` -- Cursor pagination aggregation.
* :mod:`.search` -- Search aggregation and result helpers.
* :mod:`.pages`, :mod:`.blocks`, :mod:`.databases` -- Endpoint wrappers.
"""

from __future__ import annotations

from .blocks import BlockAPI
from .classify import classify_exception, classify_response, parse_retry_after
from .databases import DatabaseAPI
from .executor import RetryingExecutor
from .pages import PageAPI
from .pagination import collect_all, cursor_fetcher
from .queue import RateLimitedQueue
from .retries import compute_backoff, retry_delay, should_retry
from .search import SearchAggregator
from .transport import AsyncNotionTransport

__all__ = [
    "AsyncNotionTransport",
    "BlockAPI",
    "DatabaseAPI",
    "PageAPI",
    "RateLimitedQueue",
    "RetryingExecutor",
    "SearchAggregator",
    "classify_exception",
    "classify_response",
    "collect_all",
    "compute_backoff",
    "cursor_fetcher",
    "parse_retry_after",
    "retry_delay",
    "should_retry",
]
