"""notionpipe -- async Notion API client with a rate-limited retry pipeline.

Public re-exports
-----------------

* **Client:** :class:`AsyncNotionClient`
* **Configuration:** :class:`NotionPipeConfig`
* **Errors:** Every :class:`NotionPipeError` variant, :class:`ErrorKind`
  and :class:`ErrorCode`
* **Models:** :class:`CallSpec`, :class:`PageResult`

Usage::

    from notionpipe import AsyncNotionClient

    async with AsyncNotionClient(token="secret_xxx") as client:
        page = await client.pages.retrieve("<page_id>")
"""

from __future__ import annotations

# ── Client ─────────────────────────────────────────────────────────────
from notionpipe.client import AsyncNotionClient

# ── Configuration ───────────────────────────────────────────────────────
from notionpipe.config import NotionPipeConfig

# ── Errors ──────────────────────────────────────────────────────────────
from notionpipe.errors import (
    AuthError,
    ErrorCode,
    ErrorKind,
    NetworkError,
    NotFoundError,
    NotionPipeError,
    RateLimitedError,
    RequestTimeoutError,
    ServerError,
    UnknownError,
    ValidationError,
)

# ── Models ──────────────────────────────────────────────────────────────
from notionpipe.models import CallSpec, PageResult

__all__ = [
    # Client
    "AsyncNotionClient",
    # Configuration
    "NotionPipeConfig",
    # Errors
    "NotionPipeError",
    "ErrorKind",
    "ErrorCode",
    "AuthError",
    "NotFoundError",
    "ValidationError",
    "RateLimitedError",
    "ServerError",
    "RequestTimeoutError",
    "NetworkError",
    "UnknownError",
    # Models
    "CallSpec",
    "PageResult",
]
