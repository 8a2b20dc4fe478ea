"""Block API wrappers for the Notion API.

:class:`BlockAPI` is a thin async wrapper around the ``/blocks`` endpoints.
:meth:`BlockAPI.get_children` auto-paginates to return every child.
"""

from __future__ import annotations

from typing import Any

from notionpipe.models import PageResult

from .transport import AsyncNotionTransport


class BlockAPI:
    """Async wrapper for the Notion Blocks API.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncNotionTransport` instance.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def retrieve(self, block_id: str) -> dict[str, Any]:
        return await self._transport.request("GET", f"/blocks/{block_id}")

    async def update(self, block_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Update a block.  *payload* is typically ``{block_type: {...}}``."""
        return await self._transport.request("PATCH", f"/blocks/{block_id}", json=payload)

    async def delete(self, block_id: str) -> dict[str, Any]:
        """Delete (archive) a block and return the archived object."""
        return await self._transport.request("DELETE", f"/blocks/{block_id}")

    async def children_page(
        self,
        block_id: str,
        start_cursor: str | None = None,
        page_size: int = 100,
    ) -> PageResult:
        """Fetch one page of a block's children."""
        return await self._transport.fetch_page(
            "GET", f"/blocks/{block_id}/children", start_cursor, page_size=page_size,
        )

    async def get_children(self, block_id: str) -> list[dict[str, Any]]:
        """Retrieve all children of a block (or page), in order."""
        return await self._transport.paginate("GET", f"/blocks/{block_id}/children")

    async def append_children(
        self,
        block_id: str,
        children: list[dict[str, Any]],
        after: str | None = None,
    ) -> dict[str, Any]:
        """Append child blocks to a parent block or page.

        Parameters
        ----------
        block_id:
            The parent block (or page) to append to.
        children:
            Block objects to append; Notion accepts at most 100 per call.
        after:
            Insert after this existing child instead of at the end.
        """
        body: dict[str, Any] = {"children": children}
        if after is not None:
            body["after"] = after
        return await self._transport.request(
            "PATCH", f"/blocks/{block_id}/children", json=body,
        )
