"""Tests for notionpipe/client.py (AsyncNotionClient)."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from notionpipe import AsyncNotionClient, NotionPipeConfig
from notionpipe.errors import ServerError
from notionpipe.notion_api.blocks import BlockAPI
from notionpipe.notion_api.databases import DatabaseAPI
from notionpipe.notion_api.pages import PageAPI
from notionpipe.notion_api.search import SearchAggregator


def make_response(status_code: int = 200, body: dict | None = None) -> httpx.Response:
    content = json.dumps(body).encode() if body is not None else b""
    resp = httpx.Response(status_code, content=content)
    resp.request = httpx.Request("POST", "https://api.notion.com/v1/search")
    return resp


def _client(*responses, **kwargs) -> AsyncNotionClient:
    kwargs.setdefault("min_request_interval", 0.0)
    kwargs.setdefault("retry_base_delay", 0.0)
    client = AsyncNotionClient(token="test-token-1234", **kwargs)
    client._transport._client.request = AsyncMock(side_effect=list(responses))
    return client


class TestConstruction:
    @pytest.mark.asyncio
    async def test_token_and_kwargs(self):
        client = AsyncNotionClient(token="test-token-1234", retry_max_attempts=7)
        assert client.config.token == "test-token-1234"
        assert client.config.retry_max_attempts == 7
        await client.close()

    @pytest.mark.asyncio
    async def test_endpoint_wrappers_share_one_transport(self):
        client = AsyncNotionClient(token="test-token-1234")
        assert isinstance(client.pages, PageAPI)
        assert isinstance(client.blocks, BlockAPI)
        assert isinstance(client.databases, DatabaseAPI)
        assert isinstance(client.search, SearchAggregator)
        assert client.pages._transport is client.blocks._transport is client._transport
        await client.close()

    @pytest.mark.asyncio
    async def test_prebuilt_config(self):
        config = NotionPipeConfig(token="test-token-1234", timeout_seconds=3.0)
        client = AsyncNotionClient(config=config)
        assert client.config is config
        await client.close()

    def test_missing_token_raises(self):
        with pytest.raises(ValueError, match="token"):
            AsyncNotionClient()

    def test_config_and_token_conflict(self):
        config = NotionPipeConfig(token="test-token-1234")
        with pytest.raises(ValueError, match="not both"):
            AsyncNotionClient("other", config=config)

    def test_config_and_kwargs_conflict(self):
        config = NotionPipeConfig(token="test-token-1234")
        with pytest.raises(ValueError, match="not both"):
            AsyncNotionClient(config=config, timeout_seconds=2.0)

    def test_invalid_kwargs_rejected_by_config(self):
        with pytest.raises(ValueError, match="retry_max_attempts"):
            AsyncNotionClient(token="test-token-1234", retry_max_attempts=0)


class TestFromEnv:
    @pytest.mark.asyncio
    async def test_reads_notion_key(self, monkeypatch):
        monkeypatch.setenv("NOTION_KEY", "env-token-abcd")
        monkeypatch.delenv("NOTION_API_KEY", raising=False)
        client = AsyncNotionClient.from_env()
        assert client.config.token == "env-token-abcd"
        await client.close()

    @pytest.mark.asyncio
    async def test_falls_back_to_notion_api_key(self, monkeypatch):
        monkeypatch.delenv("NOTION_KEY", raising=False)
        monkeypatch.setenv("NOTION_API_KEY", "api-key-wxyz")
        client = AsyncNotionClient.from_env(timeout_seconds=9.0)
        assert client.config.token == "api-key-wxyz"
        assert client.config.timeout_seconds == 9.0
        await client.close()

    def test_missing_env_raises(self, monkeypatch):
        monkeypatch.delenv("NOTION_KEY", raising=False)
        monkeypatch.delenv("NOTION_API_KEY", raising=False)
        with pytest.raises(ValueError, match="NOTION_KEY"):
            AsyncNotionClient.from_env()


class TestRequests:
    @pytest.mark.asyncio
    async def test_raw_request(self):
        client = _client(make_response(200, {"object": "user", "id": "u1"}))
        async with client:
            assert await client.request("GET", "/users/me") == {"object": "user", "id": "u1"}

    @pytest.mark.asyncio
    async def test_test_connection_ok(self):
        client = _client(make_response(200, {"results": [], "has_more": False}))
        async with client:
            assert await client.test_connection() is True
        body = client._transport._client.request.call_args.kwargs["json"]
        assert body == {"page_size": 1}

    @pytest.mark.asyncio
    async def test_test_connection_bad_token(self):
        client = _client(make_response(401, {"code": "unauthorized", "message": "invalid"}))
        async with client:
            assert await client.test_connection() is False

    @pytest.mark.asyncio
    async def test_test_connection_other_errors_propagate(self):
        client = _client(make_response(503), retry_max_attempts=1)
        async with client:
            with pytest.raises(ServerError):
                await client.test_connection()

    @pytest.mark.asyncio
    async def test_close_closes_http_client(self):
        client = AsyncNotionClient(token="test-token-1234")
        await client.close()
        assert client._transport._client.is_closed
