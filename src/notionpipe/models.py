"""Data models shared by the request pipeline.

All types are plain frozen dataclasses with no behaviour beyond what is
needed to build the next value in a sequence (the next attempt of a call,
or a page parsed from a list response).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class CallSpec:
    """One logical request plus its current attempt number.

    A retry never mutates a :class:`CallSpec`; it builds a new one through
    :meth:`next_attempt` with the same method, path, body and params.
    """

    method: str
    path: str
    body: dict[str, Any] | None = None
    params: dict[str, Any] | None = None
    attempt: int = 1

    def __post_init__(self) -> None:
        if self.attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {self.attempt}")

    def next_attempt(self) -> CallSpec:
        return replace(self, attempt=self.attempt + 1)

    @property
    def label(self) -> str:
        return f"{self.method} {self.path}"


@dataclass(frozen=True)
class PageResult:
    """One page of a cursor-paginated list response.

    Attributes
    ----------
    items:
        The ``results`` array of the page, in server order.
    next_cursor:
        Opaque token for the following page, or ``None``.
    has_more:
        Whether the server reports further pages.
    """

    items: list[Any] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> PageResult:
        """Parse a Notion list response (``{results, next_cursor, has_more}``)."""
        return cls(
            items=list(data.get("results") or []),
            next_cursor=data.get("next_cursor") or None,
            has_more=bool(data.get("has_more", False)),
        )
