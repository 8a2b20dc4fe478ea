"""Asynchronous Notion API client.

:class:`AsyncNotionClient` bundles one :class:`AsyncNotionTransport` with the
endpoint wrappers that share it, so every call made through a client instance
passes through the same rate-limited queue.

Usage::

    import asyncio
    from notionpipe import AsyncNotionClient

    async def main():
        async with AsyncNotionClient(token="secret_xxx") as client:
            pages = await client.search.search_pages("Roadmap")
            blocks = await client.blocks.get_children(pages[0]["id"])

    asyncio.run(main())
"""

from __future__ import annotations

from typing import Any

from notionpipe.config import NotionPipeConfig
from notionpipe.errors import ErrorKind, NotionPipeError
from notionpipe.notion_api.blocks import BlockAPI
from notionpipe.notion_api.databases import DatabaseAPI
from notionpipe.notion_api.pages import PageAPI
from notionpipe.notion_api.search import SearchAggregator
from notionpipe.notion_api.transport import AsyncNotionTransport


class AsyncNotionClient:
    """Asynchronous Notion API client.

    Parameters
    ----------
    token:
        Notion integration token.  Required unless *config* is given.
    config:
        A prebuilt :class:`NotionPipeConfig`; mutually exclusive with
        *token* and *kwargs*.
    **kwargs:
        Forwarded to :class:`NotionPipeConfig`.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        config: NotionPipeConfig | None = None,
        **kwargs: Any,
    ) -> None:
        if config is None:
            if not token:
                raise ValueError("token is required when no config is given")
            config = NotionPipeConfig(token=token, **kwargs)
        elif token is not None or kwargs:
            raise ValueError("pass either config or token/kwargs, not both")
        self._config = config
        self._transport = AsyncNotionTransport(config)
        self.pages = PageAPI(self._transport)
        self.blocks = BlockAPI(self._transport)
        self.databases = DatabaseAPI(self._transport)
        self.search = SearchAggregator(self._transport)

    @classmethod
    def from_env(cls, **kwargs: Any) -> AsyncNotionClient:
        """Create a client whose token comes from ``NOTION_KEY`` / ``NOTION_API_KEY``."""
        return cls(config=NotionPipeConfig.from_env(**kwargs))

    @property
    def config(self) -> NotionPipeConfig:
        return self._config

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict:
        """Issue a raw request through the shared pipeline."""
        return await self._transport.request(method, path, json=json, params=params)

    async def test_connection(self) -> bool:
        """Return ``True`` if the token works, ``False`` on an auth failure.

        Any other failure propagates.
        """
        try:
            await self.search.search(page_size=1)
        except NotionPipeError as error:
            if error.kind is ErrorKind.AUTH:
                return False
            raise
        return True

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> AsyncNotionClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
