"""Page API wrappers for the Notion API.

:class:`PageAPI` is a thin async wrapper around the ``/pages`` endpoints.
All HTTP concerns (auth, pacing, timeouts, retries) live in the transport.
"""

from __future__ import annotations

from typing import Any

from notionpipe.models import PageResult

from .pagination import collect_all
from .transport import AsyncNotionTransport


class PageAPI:
    """Async wrapper for the Notion Pages API.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncNotionTransport` instance.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def create(
        self,
        parent: dict[str, Any],
        properties: dict[str, Any],
        children: list[dict[str, Any]] | None = None,
        icon: dict[str, Any] | None = None,
        cover: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create a new page.

        Parameters
        ----------
        parent:
            Parent object, e.g. ``{"page_id": "..."}`` or
            ``{"database_id": "..."}``.
        properties:
            Page properties.  Under another page the minimal shape is
            ``{"title": [{"text": {"content": "Page title"}}]}``.
        children:
            Optional block objects to add as page content (at most 100).
        icon, cover:
            Optional icon / cover objects.
        """
        body: dict[str, Any] = {"parent": parent, "properties": properties}
        if children is not None:
            body["children"] = children
        if icon is not None:
            body["icon"] = icon
        if cover is not None:
            body["cover"] = cover
        return await self._transport.request("POST", "/pages", json=body)

    async def retrieve(self, page_id: str) -> dict[str, Any]:
        return await self._transport.request("GET", f"/pages/{page_id}")

    async def update(
        self,
        page_id: str,
        properties: dict[str, Any] | None = None,
        archived: bool | None = None,
        icon: dict[str, Any] | None = None,
        cover: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Update a page's properties, icon, cover or archive status.

        Only the given fields are sent; omitted ones are left untouched.
        """
        body: dict[str, Any] = {}
        if properties is not None:
            body["properties"] = properties
        if archived is not None:
            body["archived"] = archived
        if icon is not None:
            body["icon"] = icon
        if cover is not None:
            body["cover"] = cover
        return await self._transport.request("PATCH", f"/pages/{page_id}", json=body)

    async def archive(self, page_id: str, archived: bool = True) -> dict[str, Any]:
        return await self.update(page_id, archived=archived)

    async def retrieve_property(
        self,
        page_id: str,
        property_id: str,
        start_cursor: str | None = None,
    ) -> dict[str, Any]:
        """Retrieve one page of a page property item."""
        params = {"start_cursor": start_cursor} if start_cursor is not None else None
        return await self._transport.request(
            "GET", f"/pages/{page_id}/properties/{property_id}", params=params,
        )

    async def retrieve_property_all(self, page_id: str, property_id: str) -> dict[str, Any]:
        """Retrieve a property, following cursors for paginated types.

        Paginated properties (title, rich_text, relation, people) come back
        as a ``list`` object; their ``results`` are concatenated across all
        pages.  Any other property is returned as the single response.
        """
        responses: list[dict[str, Any]] = []

        async def fetch_page(cursor: str | None) -> PageResult:
            data = await self.retrieve_property(page_id, property_id, start_cursor=cursor)
            responses.append(data)
            if data.get("object") != "list":
                return PageResult()
            return PageResult.from_response(data)

        items = await collect_all(fetch_page)
        first = responses[0]
        if first.get("object") != "list":
            return first
        return {**first, "results": items, "next_cursor": None, "has_more": False}
