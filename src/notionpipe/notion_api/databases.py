"""Database API wrappers for the Notion API."""

from __future__ import annotations

from typing import Any

from notionpipe.models import PageResult

from .transport import AsyncNotionTransport


class DatabaseAPI:
    """Async wrapper for the Notion Databases API.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncNotionTransport` instance.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def retrieve(self, database_id: str) -> dict[str, Any]:
        return await self._transport.request("GET", f"/databases/{database_id}")

    async def query(
        self,
        database_id: str,
        query: dict[str, Any] | None = None,
        start_cursor: str | None = None,
        page_size: int = 100,
    ) -> PageResult:
        """Fetch one page of rows.

        *query* may carry ``filter`` and ``sorts`` exactly as the Notion API
        expects them.
        """
        return await self._transport.fetch_page(
            "POST", f"/databases/{database_id}/query", start_cursor,
            json=query, page_size=page_size,
        )

    async def query_all(
        self, database_id: str, query: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch every row matching *query*, across all pages."""
        return await self._transport.paginate(
            "POST", f"/databases/{database_id}/query", json=query,
        )
