"""Single-lane FIFO queue enforcing a minimum spacing between attempts.

Every call a client makes is enqueued here.  One drain task pops calls in
enqueue order and runs each to completion, retries and backoff included,
before starting the next.  Each attempt first awaits :meth:`RateLimitedQueue._pace`,
which sleeps out the remainder of ``min_interval`` since the previous attempt
start and then records the new start time.

The pending deque and the last-start timestamp are touched only by the
drain task and the task it is currently running, so no lock is needed.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from notionpipe.observability import NoopMetricsHook, get_logger

log = get_logger("notionpipe.queue")

T = TypeVar("T")

Pace = Callable[[], Awaitable[float]]
Task = Callable[[Pace], Awaitable[T]]


def _cancel_requested() -> bool:
    """Whether the running task has a pending ``cancel()`` request.

    ``Task.cancelling`` only exists on Python 3.11+; older interpreters
    report ``False`` and rely on the queue's closed flag.
    """
    task = asyncio.current_task()
    cancelling = getattr(task, "cancelling", None)
    return bool(cancelling is not None and cancelling())


class RateLimitedQueue:
    """Serialise calls through one lane with a minimum start-to-start gap.

    Parameters
    ----------
    min_interval:
        Minimum number of seconds between two consecutive attempt starts.
    metrics:
        Optional metrics backend (``notionpipe.queue_depth`` gauge).
    clock:
        Monotonic clock in seconds.  Injectable for tests.
    sleep:
        Coroutine used for spacing waits.  Injectable for tests.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        metrics: Any | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self._min_interval = min_interval
        self._metrics = metrics if metrics is not None else NoopMetricsHook()
        self._clock = clock
        self._sleep = sleep
        self._pending: deque[tuple[Task[Any], asyncio.Future[Any]]] = deque()
        self._drain_task: asyncio.Task[None] | None = None
        self._last_start: float | None = None
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of calls waiting to start (excludes the running one)."""
        return len(self._pending)

    @property
    def last_start(self) -> float | None:
        """Clock value of the most recent attempt start, if any."""
        return self._last_start

    async def enqueue(self, task: Task[T]) -> T:
        """Queue *task* and wait for its result.

        *task* is called with the pacing gate once it reaches the head of
        the queue; its return value (or exception) is delivered here.
        """
        if self._closed:
            raise RuntimeError("RateLimitedQueue is closed")
        loop = asyncio.get_running_loop()
        future: asyncio.Future[T] = loop.create_future()
        self._pending.append((task, future))
        self._metrics.gauge("notionpipe.queue_depth", len(self._pending))
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = loop.create_task(self._drain())
        return await future

    async def _drain(self) -> None:
        while self._pending:
            task, future = self._pending.popleft()
            self._metrics.gauge("notionpipe.queue_depth", len(self._pending))
            if future.done():
                # Caller gave up while queued.
                continue
            try:
                result = await task(self._pace)
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                if self._closed or _cancel_requested():
                    raise
                # The task raised CancelledError on its own; keep draining.
                continue
            except Exception as exc:
                if not future.done():
                    future.set_exception(exc)
            else:
                if not future.done():
                    future.set_result(result)

    async def _pace(self) -> float:
        """Wait until ``min_interval`` has passed since the last start.

        Returns the number of seconds waited.
        """
        waited = 0.0
        if self._last_start is not None:
            remaining = self._min_interval - (self._clock() - self._last_start)
            # Loop: a timer may fire marginally early.
            while remaining > 0:
                log.debug(
                    "Pacing request start",
                    extra={"extra_fields": {"op": "pace", "wait": remaining}},
                )
                await self._sleep(remaining)
                waited += remaining
                remaining = self._min_interval - (self._clock() - self._last_start)
        self._last_start = self._clock()
        return waited

    async def aclose(self) -> None:
        """Stop the drain task and cancel every call still queued."""
        self._closed = True
        while self._pending:
            _, future = self._pending.popleft()
            if not future.done():
                future.cancel()
        if self._drain_task is not None and not self._drain_task.done():
            self._drain_task.cancel()
            try:
                await self._drain_task
            except asyncio.CancelledError:
                pass
        self._drain_task = None
