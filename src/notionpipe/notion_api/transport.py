"""Async HTTP transport for the Notion API.

:class:`AsyncNotionTransport` wires the request pipeline together:

    caller -> RateLimitedQueue.enqueue -> RetryingExecutor.execute
           -> httpx.AsyncClient.request -> classify -> retry-or-return

One transport owns one queue, so every request issued through it (from any
number of concurrent callers) shares the same start-spacing guarantee.
"""

from __future__ import annotations

from functools import partial
from typing import Any

import httpx

from notionpipe.config import NotionPipeConfig
from notionpipe.models import CallSpec, PageResult
from notionpipe.observability import NoopMetricsHook

from .executor import RetryingExecutor
from .pagination import collect_all, cursor_fetcher
from .queue import RateLimitedQueue


class AsyncNotionTransport:
    """Asynchronous HTTP transport with auth, pacing, timeouts and retry.

    Parameters
    ----------
    config:
        A :class:`NotionPipeConfig` instance controlling all transport behaviour.
    """

    def __init__(self, config: NotionPipeConfig) -> None:
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()

        proxy: httpx.URL | str | None = config.http_proxy
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers=config.headers,
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=proxy,
        )
        self._queue = RateLimitedQueue(config.min_request_interval, metrics=self._metrics)
        self._executor = RetryingExecutor(config, self._send, metrics=self._metrics)

    @property
    def config(self) -> NotionPipeConfig:
        return self._config

    async def _send(self, call: CallSpec) -> httpx.Response:
        kwargs: dict[str, Any] = {}
        if call.body is not None:
            kwargs["json"] = call.body
        if call.params is not None:
            kwargs["params"] = call.params
        return await self._client.request(call.method, call.path, **kwargs)

    # -- public API --------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict:
        """Execute one request through the queue and retry pipeline.

        Parameters
        ----------
        method:
            HTTP method (``GET``, ``POST``, ``PATCH``, ``DELETE``).
        path:
            API path relative to ``base_url`` (e.g. ``/pages``).
        json:
            Optional JSON body.
        params:
            Optional query-string parameters.

        Returns
        -------
        dict
            Parsed JSON response body.

        Raises
        ------
        AuthError
            On 401 responses.
        ValidationError
            On 400, 403 and 422 responses.
        NotFoundError
            On 404 responses.
        RateLimitedError, ServerError, RequestTimeoutError, NetworkError
            When the failure persisted through every attempt.
        UnknownError
            On any other failure.
        """
        call = CallSpec(method.upper(), path, body=json, params=params)
        return await self._queue.enqueue(partial(self._executor.execute, call))

    async def fetch_page(
        self,
        method: str,
        path: str,
        cursor: str | None = None,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        page_size: int = 100,
    ) -> PageResult:
        """Fetch a single page of a cursor-paginated endpoint."""
        fetch = cursor_fetcher(self, method, path, json=json, params=params, page_size=page_size)
        return await fetch(cursor)

    async def paginate(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        page_size: int = 100,
    ) -> list[Any]:
        """Fetch every page of a list endpoint and return all results in order.

        Any failure aborts the whole listing; no partial result is returned.
        """
        fetch = cursor_fetcher(self, method, path, json=json, params=params, page_size=page_size)
        return await collect_all(fetch)

    async def close(self) -> None:
        """Cancel queued calls and close the underlying HTTP client."""
        await self._queue.aclose()
        await self._client.aclose()

    async def __aenter__(self) -> AsyncNotionTransport:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()
