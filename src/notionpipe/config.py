"""Client configuration for notionpipe.

:class:`NotionPipeConfig` is a frozen dataclass that captures every tuneable
knob of the request pipeline.  It is built once per client and never mutated;
the transport, queue, and executor all read from the same instance.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from typing import Any

DEFAULT_NOTION_VERSION = "2022-06-28"
DEFAULT_BASE_URL = "https://api.notion.com/v1"

# Environment variables consulted by :meth:`NotionPipeConfig.from_env`, in order.
TOKEN_ENV_VARS: tuple[str, ...] = ("NOTION_KEY", "NOTION_API_KEY")


@dataclass(frozen=True)
class NotionPipeConfig:
    """Complete configuration for a notionpipe client.

    Every parameter has a sensible default so that the only *required*
    value is ``token``.

    Parameters
    ----------
    token:
        Notion integration token.  **Required.**  Never logged.
    notion_version:
        Value of the ``Notion-Version`` header sent with every request.
    base_url:
        API root URL.  Override for proxy or testing environments.
    timeout_seconds:
        Deadline for a *single* attempt.  Each retry gets a fresh deadline.
    retry_max_attempts:
        Total attempts per logical call, including the first one.
    retry_base_delay:
        Base delay (seconds) for exponential backoff.  Attempt *n* waits
        ``retry_base_delay * 2 ** (n - 1)`` before attempt *n + 1*.
    retry_after_max:
        Upper bound (seconds) applied to server-directed ``Retry-After``
        waits.  ``None`` honours the server value as-is.
    retry_jitter:
        Scale exponential backoff delays into 50-100 % of their value.
        Server-directed waits are never jittered.
    min_request_interval:
        Minimum spacing (seconds) between consecutive attempt starts of one
        client.  The default of 0.35 s keeps under ~3 requests per second.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    metrics:
        Optional :class:`~notionpipe.observability.MetricsHook` backend.
    debug_dump_payload:
        Write the (redacted) request/response of every attempt to *stderr*.
    """

    # ── Core ────────────────────────────────────────────────────────────
    token: str = ""

    notion_version: str = DEFAULT_NOTION_VERSION

    base_url: str = DEFAULT_BASE_URL

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Retry ───────────────────────────────────────────────────────────
    retry_max_attempts: int = 3

    retry_base_delay: float = 1.0

    retry_after_max: float | None = None

    retry_jitter: bool = False

    # ── Rate ────────────────────────────────────────────────────────────
    min_request_interval: float = 0.35

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        from urllib.parse import urlparse

        parsed = urlparse(self.base_url)
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise ValueError(
                f"base_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS to protect your API token, or target localhost for testing."
            )

        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_after_max is not None and self.retry_after_max < 0:
            raise ValueError(f"retry_after_max must be >= 0, got {self.retry_after_max}")
        if self.min_request_interval < 0:
            raise ValueError(
                f"min_request_interval must be >= 0, got {self.min_request_interval}"
            )
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    @classmethod
    def from_env(cls, **overrides: Any) -> NotionPipeConfig:
        """Build a config whose token comes from ``NOTION_KEY`` / ``NOTION_API_KEY``.

        Raises
        ------
        ValueError
            If neither environment variable is set and no ``token`` override
            was given.
        """
        token = overrides.pop("token", None)
        if not token:
            token = next((os.environ[v] for v in TOKEN_ENV_VARS if os.environ.get(v)), None)
        if not token:
            raise ValueError(
                "Notion API key not found. Pass token= or set the "
                "NOTION_KEY environment variable."
            )
        return cls(token=token, **overrides)

    @property
    def headers(self) -> dict[str, str]:
        """Headers attached to every request."""
        return {
            "Authorization": f"Bearer {self.token}",
            "Notion-Version": self.notion_version,
            "Content-Type": "application/json",
        }

    def __repr__(self) -> str:
        """Mask the token to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "token":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"token='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"NotionPipeConfig({', '.join(parts)})"
