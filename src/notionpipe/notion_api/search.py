"""Search aggregation and pure post-processing helpers.

:class:`SearchAggregator` shapes query / filter / sort arguments into the
``POST /search`` body and pages through the results with
:func:`~notionpipe.notion_api.pagination.collect_all`.  The convenience
narrowings (pages only, databases only, exact or partial title) run over the
fully aggregated result and issue no extra requests.

The module-level helpers operate on plain result lists and never touch the
network.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any, Literal

from notionpipe.models import PageResult

from .pagination import collect_all
from .transport import AsyncNotionTransport

ObjectFilter = Literal["page", "database"]
SortDirection = Literal["ascending", "descending"]
SortTimestamp = Literal["last_edited_time"]


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def _plain_text(rich_text: Iterable[dict[str, Any]] | None) -> str:
    return "".join(t.get("plain_text", "") for t in rich_text or ())


def extract_title(item: dict[str, Any]) -> str:
    """Return the plain-text title of a page or database object.

    Databases carry a top-level ``title`` array; pages carry it in whichever
    property has ``type == "title"``.  Returns ``""`` when none is found.
    """
    if item.get("object") == "database":
        return _plain_text(item.get("title"))
    for value in (item.get("properties") or {}).values():
        if isinstance(value, dict) and value.get("type") == "title":
            return _plain_text(value.get("title"))
    return ""


def filter_pages(results: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    return [r for r in results if r.get("object") == "page"]


def filter_databases(results: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    return [r for r in results if r.get("object") == "database"]


def find_by_exact_title(
    results: Iterable[dict[str, Any]], title: str,
) -> dict[str, Any] | None:
    """First result whose title equals *title*, or ``None``."""
    return next((r for r in results if extract_title(r) == title), None)


def find_by_partial_title(
    results: Iterable[dict[str, Any]], query: str,
) -> list[dict[str, Any]]:
    """Results whose title contains *query*, case-insensitively."""
    needle = query.lower()
    return [r for r in results if needle in extract_title(r).lower()]


def _timestamp(item: dict[str, Any], key: str) -> datetime:
    raw = item.get(key) or "1970-01-01T00:00:00+00:00"
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    # Naive values are taken as UTC so they compare with aware ones.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_by_last_edited(
    results: Iterable[dict[str, Any]], direction: SortDirection = "descending",
) -> list[dict[str, Any]]:
    return sorted(
        results,
        key=lambda r: _timestamp(r, "last_edited_time"),
        reverse=direction == "descending",
    )


def sort_by_created(
    results: Iterable[dict[str, Any]], direction: SortDirection = "descending",
) -> list[dict[str, Any]]:
    return sorted(
        results,
        key=lambda r: _timestamp(r, "created_time"),
        reverse=direction == "descending",
    )


def group_by_parent(results: Iterable[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    """Group results under ``page:<id>``, ``database:<id>``, ``workspace`` or ``unknown``."""
    grouped: dict[str, list[dict[str, Any]]] = {}
    for item in results:
        parent = item.get("parent") or {}
        ptype = parent.get("type")
        if ptype == "page_id":
            key = f"page:{parent.get('page_id')}"
        elif ptype == "database_id":
            key = f"database:{parent.get('database_id')}"
        elif ptype == "workspace":
            key = "workspace"
        else:
            key = "unknown"
        grouped.setdefault(key, []).append(item)
    return grouped


def summarize_results(results: list[dict[str, Any]]) -> dict[str, Any]:
    """Counts and titles for a list of search results."""
    return {
        "total": len(results),
        "pages": len(filter_pages(results)),
        "databases": len(filter_databases(results)),
        "titles": [extract_title(r) for r in results],
    }


def build_search_body(
    query: str | None = None,
    filter_value: ObjectFilter | None = None,
    sort_direction: SortDirection | None = None,
    sort_timestamp: SortTimestamp = "last_edited_time",
    page_size: int | None = None,
    start_cursor: str | None = None,
) -> dict[str, Any]:
    """Shape search arguments into the ``POST /search`` body.

    Keys are omitted rather than sent as ``null`` when not given.
    """
    body: dict[str, Any] = {}
    if query:
        body["query"] = query
    if filter_value is not None:
        body["filter"] = {"property": "object", "value": filter_value}
    if sort_direction is not None:
        body["sort"] = {"direction": sort_direction, "timestamp": sort_timestamp}
    if start_cursor is not None:
        body["start_cursor"] = start_cursor
    if page_size is not None:
        body["page_size"] = page_size
    return body


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

class SearchAggregator:
    """Search pages and databases shared with the integration.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncNotionTransport` instance.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def search(
        self,
        query: str | None = None,
        *,
        filter_value: ObjectFilter | None = None,
        sort_direction: SortDirection | None = None,
        sort_timestamp: SortTimestamp = "last_edited_time",
        start_cursor: str | None = None,
        page_size: int = 100,
    ) -> PageResult:
        """Fetch one page of search results."""
        body = build_search_body(
            query, filter_value, sort_direction, sort_timestamp,
            page_size=page_size, start_cursor=start_cursor,
        )
        data = await self._transport.request("POST", "/search", json=body)
        return PageResult.from_response(data)

    async def search_all(
        self,
        query: str | None = None,
        *,
        filter_value: ObjectFilter | None = None,
        sort_direction: SortDirection | None = None,
        sort_timestamp: SortTimestamp = "last_edited_time",
        page_size: int = 100,
    ) -> list[dict[str, Any]]:
        """Fetch every search result across all pages.

        The first failing page aborts the search and its error propagates.
        """

        async def fetch_page(cursor: str | None) -> PageResult:
            return await self.search(
                query,
                filter_value=filter_value,
                sort_direction=sort_direction,
                sort_timestamp=sort_timestamp,
                start_cursor=cursor,
                page_size=page_size,
            )

        return await collect_all(fetch_page)

    async def search_pages(
        self, query: str | None = None, *, sort_direction: SortDirection | None = None,
    ) -> list[dict[str, Any]]:
        results = await self.search_all(query, filter_value="page", sort_direction=sort_direction)
        return filter_pages(results)

    async def search_databases(
        self, query: str | None = None, *, sort_direction: SortDirection | None = None,
    ) -> list[dict[str, Any]]:
        results = await self.search_all(
            query, filter_value="database", sort_direction=sort_direction,
        )
        return filter_databases(results)

    async def find_page_by_title(self, title: str) -> dict[str, Any] | None:
        """The first page whose title is exactly *title*, or ``None``."""
        return find_by_exact_title(await self.search_pages(title), title)

    async def find_database_by_title(self, title: str) -> dict[str, Any] | None:
        """The first database whose title is exactly *title*, or ``None``."""
        return find_by_exact_title(await self.search_databases(title), title)

    async def find_by_partial_title(
        self, query: str, *, filter_value: ObjectFilter | None = None,
    ) -> list[dict[str, Any]]:
        results = await self.search_all(query, filter_value=filter_value)
        return find_by_partial_title(results, query)
