"""Cursor-based pagination aggregation.

:func:`collect_all` drives any cursor-accepting page fetcher to exhaustion.
:func:`cursor_fetcher` adapts a transport endpoint into such a fetcher by
placing ``start_cursor`` / ``page_size`` where Notion expects them: the JSON
body for ``POST``/``PATCH`` and the query string for ``GET``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from notionpipe.models import PageResult

if TYPE_CHECKING:
    from .transport import AsyncNotionTransport

FetchPage = Callable[[str | None], Awaitable[PageResult]]

_BODY_METHODS = frozenset({"POST", "PATCH"})


async def collect_all(fetch_page: FetchPage, *, start_cursor: str | None = None) -> list[Any]:
    """Concatenate every page returned by *fetch_page*.

    Calls ``fetch_page(start_cursor)`` first, then keeps following
    ``next_cursor`` while ``has_more`` is true.  A missing cursor ends the
    loop even if ``has_more`` claims otherwise.

    An exception from any page propagates immediately and the items
    accumulated so far are dropped, so callers never see a truncated listing.
    """
    items: list[Any] = []
    page = await fetch_page(start_cursor)
    items.extend(page.items)
    while page.has_more and page.next_cursor:
        page = await fetch_page(page.next_cursor)
        items.extend(page.items)
    return items


def cursor_fetcher(
    transport: AsyncNotionTransport,
    method: str,
    path: str,
    *,
    json: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
    page_size: int = 100,
) -> FetchPage:
    """Build a page fetcher for *method* *path* on *transport*.

    The caller's *json* / *params* dicts are copied per page, never mutated.
    """
    method = method.upper()

    async def fetch_page(cursor: str | None) -> PageResult:
        if method in _BODY_METHODS:
            body = dict(json or {})
            body["page_size"] = page_size
            if cursor is not None:
                body["start_cursor"] = cursor
            else:
                body.pop("start_cursor", None)
            data = await transport.request(method, path, json=body, params=params)
        else:
            query = dict(params or {})
            query["page_size"] = page_size
            if cursor is not None:
                query["start_cursor"] = cursor
            else:
                query.pop("start_cursor", None)
            data = await transport.request(method, path, json=json, params=query)
        return PageResult.from_response(data)

    return fetch_page
