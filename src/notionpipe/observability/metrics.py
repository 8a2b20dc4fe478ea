"""Metrics hook protocol and no-op default implementation.

The pipeline emits counters, timings and gauges at each attempt.  By default
a :class:`NoopMetricsHook` is used; pass any object satisfying
:class:`MetricsHook` as ``NotionPipeConfig(metrics=...)`` to route them to
StatsD, Prometheus, Datadog, etc.

Emitted metric names:

* ``notionpipe.requests_total``        -- counter, tagged with ``status``
* ``notionpipe.retries_total``         -- counter, tagged with ``reason``
* ``notionpipe.rate_limited_total``    -- counter
* ``notionpipe.request_duration_ms``   -- timing
* ``notionpipe.rate_limit_wait_ms``    -- timing
* ``notionpipe.queue_depth``           -- gauge
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    *tags* are string key/value pairs; backends translate them into their
    own labelling scheme.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Metrics backend that discards every data point."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
