"""Unit tests for notionpipe/notion_api/transport.py.

The underlying ``httpx.AsyncClient.request`` is replaced with an
``AsyncMock`` so the full queue -> executor -> classify path runs without
network access.
"""

from __future__ import annotations

import asyncio
import json
import time
from unittest.mock import AsyncMock

import httpx
import pytest

from notionpipe.config import NotionPipeConfig
from notionpipe.errors import AuthError, NotFoundError, ServerError
from notionpipe.notion_api.transport import AsyncNotionTransport


def make_response(status_code: int = 200, body: dict | None = None, headers=None) -> httpx.Response:
    content = json.dumps(body).encode() if body is not None else b""
    resp = httpx.Response(status_code, content=content, headers=headers or {})
    resp.request = httpx.Request("GET", "https://api.notion.com/v1/test")
    return resp


def _make_config(**overrides) -> NotionPipeConfig:
    defaults = dict(
        token="test-token-1234",
        retry_max_attempts=3,
        retry_base_delay=0.0,
        min_request_interval=0.0,
        timeout_seconds=5.0,
    )
    defaults.update(overrides)
    return NotionPipeConfig(**defaults)


def _transport(*responses, **overrides) -> AsyncNotionTransport:
    transport = AsyncNotionTransport(_make_config(**overrides))
    transport._client.request = AsyncMock(side_effect=list(responses))
    return transport


class TestClientSetup:
    @pytest.mark.asyncio
    async def test_default_headers(self):
        transport = AsyncNotionTransport(_make_config())
        headers = transport._client.headers
        assert headers["Authorization"] == "Bearer test-token-1234"
        assert headers["Notion-Version"] == "2022-06-28"
        assert headers["Content-Type"] == "application/json"
        await transport.close()

    @pytest.mark.asyncio
    async def test_base_url(self):
        transport = AsyncNotionTransport(_make_config(base_url="https://example.test/v1"))
        assert str(transport._client.base_url).rstrip("/") == "https://example.test/v1"
        await transport.close()

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self):
        async with AsyncNotionTransport(_make_config()) as transport:
            client = transport._client
        assert client.is_closed


class TestRequest:
    @pytest.mark.asyncio
    async def test_success_returns_json(self):
        transport = _transport(make_response(200, {"object": "page", "id": "p1"}))
        assert await transport.request("GET", "/pages/p1") == {"object": "page", "id": "p1"}
        transport._client.request.assert_awaited_once_with("GET", "/pages/p1")

    @pytest.mark.asyncio
    async def test_method_uppercased_and_body_forwarded(self):
        transport = _transport(make_response(200, {}))
        await transport.request("post", "/search", json={"query": "x"}, params={"a": 1})
        transport._client.request.assert_awaited_once_with(
            "POST", "/search", json={"query": "x"}, params={"a": 1},
        )

    @pytest.mark.asyncio
    async def test_retries_through_the_pipeline(self):
        transport = _transport(make_response(502), make_response(200, {"ok": True}))
        assert await transport.request("GET", "/x") == {"ok": True}
        assert transport._client.request.await_count == 2

    @pytest.mark.asyncio
    async def test_auth_error_not_retried(self):
        transport = _transport(make_response(401, {"code": "unauthorized", "message": "no"}))
        with pytest.raises(AuthError):
            await transport.request("GET", "/users/me")
        assert transport._client.request.await_count == 1

    @pytest.mark.asyncio
    async def test_not_found_carries_operation(self):
        transport = _transport(make_response(404, {"code": "object_not_found", "message": "gone"}))
        with pytest.raises(NotFoundError) as exc_info:
            await transport.request("GET", "/pages/missing")
        assert exc_info.value.context["operation"] == "GET /pages/missing"

    @pytest.mark.asyncio
    async def test_exhausted_server_error(self):
        transport = _transport(make_response(500), retry_max_attempts=2)
        with pytest.raises(ServerError) as exc_info:
            await transport.request("GET", "/x")
        assert exc_info.value.context["attempts"] == 2

    @pytest.mark.asyncio
    async def test_connect_error_retried(self):
        transport = _transport(httpx.ConnectError("refused"), make_response(200, {"ok": 1}))
        assert await transport.request("GET", "/x") == {"ok": 1}


class TestSpacing:
    @pytest.mark.asyncio
    async def test_concurrent_requests_are_spaced(self):
        interval = 0.05
        transport = AsyncNotionTransport(_make_config(min_request_interval=interval))
        starts: list[float] = []

        async def fake_request(method, path, **kwargs):
            starts.append(time.monotonic())
            return make_response(200, {})

        transport._client.request = fake_request
        await asyncio.gather(*(transport.request("GET", f"/x/{i}") for i in range(4)))

        assert len(starts) == 4
        gaps = [b - a for a, b in zip(starts, starts[1:])]
        assert all(gap >= interval * 0.9 for gap in gaps)

    @pytest.mark.asyncio
    async def test_requests_complete_in_enqueue_order(self):
        transport = _transport(*(make_response(200, {"n": i}) for i in range(5)))
        results = await asyncio.gather(*(transport.request("GET", f"/x/{i}") for i in range(5)))
        assert [r["n"] for r in results] == list(range(5))
        paths = [c.args[1] for c in transport._client.request.call_args_list]
        assert paths == [f"/x/{i}" for i in range(5)]


class TestPagination:
    @pytest.mark.asyncio
    async def test_fetch_page(self):
        transport = _transport(
            make_response(200, {"results": [{"id": "b1"}], "next_cursor": "c", "has_more": True}),
        )
        page = await transport.fetch_page("GET", "/blocks/p/children", "c0", page_size=10)
        assert page.items == [{"id": "b1"}]
        assert page.next_cursor == "c"
        transport._client.request.assert_awaited_once_with(
            "GET", "/blocks/p/children", params={"page_size": 10, "start_cursor": "c0"},
        )

    @pytest.mark.asyncio
    async def test_paginate_collects_every_page(self):
        transport = _transport(
            make_response(200, {"results": list(range(10)), "next_cursor": "c1", "has_more": True}),
            make_response(200, {"results": list(range(10, 20)), "next_cursor": "c2", "has_more": True}),
            make_response(200, {"results": list(range(20, 25)), "next_cursor": None, "has_more": False}),
        )
        items = await transport.paginate("POST", "/databases/d/query", json={"filter": {}})
        assert items == list(range(25))
        assert transport._client.request.await_count == 3
        last_body = transport._client.request.call_args_list[2].kwargs["json"]
        assert last_body == {"filter": {}, "page_size": 100, "start_cursor": "c2"}

    @pytest.mark.asyncio
    async def test_paginate_failure_returns_nothing(self):
        transport = _transport(
            make_response(200, {"results": [1], "next_cursor": "c1", "has_more": True}),
            make_response(404, {"code": "object_not_found", "message": "gone"}),
        )
        with pytest.raises(NotFoundError):
            await transport.paginate("GET", "/blocks/p/children")


class TestClose:
    @pytest.mark.asyncio
    async def test_request_after_close_raises(self):
        transport = _transport(make_response(200, {}))
        await transport.close()
        with pytest.raises(RuntimeError):
            await transport.request("GET", "/x")
