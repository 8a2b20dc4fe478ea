"""Map raw failures to classified errors.

Two pure, total functions:

* :func:`classify_response` -- an HTTP status, parsed error body and
  response headers become exactly one :class:`~notionpipe.errors.NotionPipeError`
  variant.
* :func:`classify_exception` -- a transport-level exception (deadline
  exceeded, connection failure, anything else) becomes one variant.

Neither function logs, sleeps, or mutates its inputs, so classifying the same
inputs twice yields equal errors.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Mapping
from typing import Any

import httpx

from notionpipe.errors import (
    AuthError,
    NetworkError,
    NotFoundError,
    NotionPipeError,
    RateLimitedError,
    RequestTimeoutError,
    ServerError,
    UnknownError,
    ValidationError,
)

_VALIDATION_STATUSES: frozenset[int] = frozenset({400, 403, 422})


def parse_retry_after(headers: Mapping[str, str] | None) -> float | None:
    """Extract the ``Retry-After`` header (seconds) as a float, or ``None``.

    HTTP-date values, negative, empty and non-finite values are treated as
    absent.
    """
    if not headers:
        return None
    raw = headers.get("retry-after")
    if raw is None:
        # Plain dicts are case-sensitive; httpx.Headers is not.
        raw = next(
            (v for k, v in headers.items() if k.lower() == "retry-after"),
            None,
        )
    if raw is None:
        return None
    try:
        value = float(raw)
    except (ValueError, TypeError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def classify_response(
    status: int,
    body: Any,
    headers: Mapping[str, str] | None = None,
    *,
    default_retry_after: float | None = None,
) -> NotionPipeError:
    """Classify a non-2xx response.

    Parameters
    ----------
    status:
        The HTTP status code.
    body:
        The parsed JSON error body (``{status, code, message}``).  Anything
        that is not a dict is treated as an empty body.
    headers:
        Response headers; only ``retry-after`` is consulted.
    default_retry_after:
        Wait (seconds) reported for a 429 without a usable header.  ``None``
        leaves the decision to the backoff policy.
    """
    if not isinstance(body, dict):
        body = {}
    notion_code = str(body.get("code") or "")
    message = str(body.get("message") or "")

    if status == 401:
        return AuthError(
            message or "Invalid API key or insufficient permissions",
            status=status,
            notion_code=notion_code,
        )
    if status in _VALIDATION_STATUSES:
        field = body.get("field")
        context: dict[str, Any] = {}
        if field is not None:
            context["field"] = field
        return ValidationError(
            message or f"Request rejected with status {status}",
            status=status,
            notion_code=notion_code,
            field=field,
            context=context,
        )
    if status == 404:
        return NotFoundError(
            message or "Resource not found",
            status=status,
            notion_code=notion_code or "object_not_found",
        )
    if status == 429:
        retry_after = parse_retry_after(headers)
        if retry_after is None:
            retry_after = default_retry_after
        if retry_after is not None:
            text = f"Rate limited. Retry after {retry_after:g} seconds"
        else:
            text = "Rate limited"
        return RateLimitedError(
            message or text,
            retry_after=retry_after,
            notion_code=notion_code or "rate_limited",
        )
    if 500 <= status < 600:
        return ServerError(
            message or f"Server error {status}",
            status=status,
            notion_code=notion_code,
        )
    return UnknownError(
        message or f"Unexpected status {status}",
        status=status,
        notion_code=notion_code,
    )


def classify_exception(exc: Exception) -> NotionPipeError:
    """Classify an exception raised while an attempt was in flight."""
    if isinstance(exc, NotionPipeError):
        return exc
    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return RequestTimeoutError(cause=exc)
    if isinstance(exc, httpx.TransportError):
        return NetworkError(f"Network error: {exc}", cause=exc)
    return UnknownError(f"Unexpected error: {exc!r}", status=None, cause=exc)
