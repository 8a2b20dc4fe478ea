"""Execute one logical call with per-attempt timeouts and bounded retries.

:class:`RetryingExecutor` runs the attempt loop for a single
:class:`~notionpipe.models.CallSpec`:

1. Wait on the queue's pacing gate (which stamps the attempt start).
2. Send the request under a deadline of ``timeout_seconds`` for this
   attempt only; an expired deadline cancels the in-flight request.
3. On ``2xx`` -- return the parsed JSON body.
4. On failure -- classify the status or exception.
5. Retryable with budget left -- sleep (``Retry-After`` or exponential
   backoff), then retry with ``call.next_attempt()``.
6. Otherwise -- raise the classified error.
"""

from __future__ import annotations

import asyncio
import json as _json
import sys
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from notionpipe.config import NotionPipeConfig
from notionpipe.errors import NotionPipeError, UnknownError
from notionpipe.models import CallSpec
from notionpipe.observability import NoopMetricsHook, get_logger

from .classify import classify_exception, classify_response
from .retries import retry_delay, should_retry

log = get_logger("notionpipe.executor")

Send = Callable[[CallSpec], Awaitable[httpx.Response]]
Pace = Callable[[], Awaitable[float]]


def _parse_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


def _dump_payload(
    config: NotionPipeConfig,
    call: CallSpec,
    response: httpx.Response,
) -> None:
    """Write a redacted dump of one attempt to stderr."""
    from notionpipe.utils.redact import redact

    dump: dict[str, Any] = {
        "method": call.method,
        "path": call.path,
        "attempt": call.attempt,
        "response_status": response.status_code,
    }
    if call.body is not None:
        dump["request_body"] = call.body
    if call.params is not None:
        dump["request_params"] = call.params
    dump["response_body"] = _parse_body(response) or response.text[:1000]
    print(
        _json.dumps(redact(dump, config.token), indent=2, default=str),
        file=sys.stderr,
    )


class RetryingExecutor:
    """Perform one logical call, retrying retryable failures.

    Parameters
    ----------
    config:
        Supplies ``timeout_seconds``, the retry budget and backoff settings.
    send:
        Coroutine function issuing the HTTP request for a :class:`CallSpec`.
    metrics:
        Optional metrics backend; defaults to ``config.metrics`` or a no-op.
    sleep:
        Coroutine used for backoff waits.  Injectable for tests.
    """

    def __init__(
        self,
        config: NotionPipeConfig,
        send: Send,
        *,
        metrics: Any | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self._send = send
        if metrics is None:
            metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._metrics = metrics
        self._sleep = sleep

    async def execute(self, call: CallSpec, pace: Pace | None = None) -> dict:
        """Run *call* until it succeeds or fails terminally.

        Parameters
        ----------
        call:
            The first attempt of the call (usually ``attempt=1``).
        pace:
            Pacing gate awaited before every attempt, retries included.
            ``None`` disables pacing.

        Returns
        -------
        dict
            Parsed JSON body of the successful response (``{}`` when the
            response has no body).

        Raises
        ------
        NotionPipeError
            The classified error of the last attempt.  When retries ran out,
            ``error.context["attempts"]`` holds the number of attempts made.
        """
        max_attempts = self._config.retry_max_attempts
        while True:
            try:
                return await self._attempt(call, pace)
            except NotionPipeError as error:
                if not should_retry(error, call.attempt, max_attempts):
                    if error.retryable:
                        error.context["attempts"] = call.attempt
                    raise

                delay = retry_delay(
                    error,
                    call.attempt,
                    base=self._config.retry_base_delay,
                    jitter=self._config.retry_jitter,
                    retry_after_max=self._config.retry_after_max,
                )
                tags = {"method": call.method, "path": call.path, "reason": error.kind.value}
                self._metrics.increment("notionpipe.retries_total", tags=tags)
                log.warning(
                    "Retrying request",
                    extra={
                        "extra_fields": {
                            "op": "request",
                            "method": call.method,
                            "path": call.path,
                            "attempt": call.attempt,
                            "kind": error.kind.value,
                            "status_code": error.status,
                            "delay": delay,
                        }
                    },
                )
                await self._sleep(delay)
                call = call.next_attempt()

    async def _attempt(self, call: CallSpec, pace: Pace | None) -> dict:
        tags = {"method": call.method, "path": call.path}

        if pace is not None:
            waited = await pace()
            if waited > 0:
                self._metrics.timing("notionpipe.rate_limit_wait_ms", waited * 1000, tags=tags)

        t0 = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._send(call), timeout=self._config.timeout_seconds,
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error = classify_exception(exc)
            self._metrics.increment(
                "notionpipe.requests_total", tags={**tags, "status": error.kind.value},
            )
            log.warning(
                "Request failed before a response was received",
                extra={
                    "extra_fields": {
                        "op": "request",
                        "method": call.method,
                        "path": call.path,
                        "attempt": call.attempt,
                        "kind": error.kind.value,
                        "error": str(exc) or type(exc).__name__,
                    }
                },
            )
            if error is exc:
                raise
            raise error from exc

        elapsed_ms = (time.monotonic() - t0) * 1000
        status_tags = {**tags, "status": str(response.status_code)}
        self._metrics.increment("notionpipe.requests_total", tags=status_tags)
        self._metrics.timing("notionpipe.request_duration_ms", elapsed_ms, tags=status_tags)

        if self._config.debug_dump_payload:
            _dump_payload(self._config, call, response)

        if 200 <= response.status_code < 300:
            if response.status_code == 204 or not response.content:
                return {}
            try:
                result: dict = response.json()
            except ValueError as exc:
                raise UnknownError(
                    f"Malformed JSON in response to {call.label}",
                    status=response.status_code,
                    cause=exc,
                ) from exc
            return result

        error = classify_response(response.status_code, _parse_body(response), response.headers)
        if response.status_code == 429:
            self._metrics.increment("notionpipe.rate_limited_total", tags=tags)
        error.context.setdefault("operation", call.label)
        raise error
