"""Classified error hierarchy for the notionpipe client.

Every failure the pipeline can surface is a :class:`NotionPipeError`.  Each
instance is *tagged* with an :class:`ErrorKind` and carries a ``retryable``
flag, so the executor decides whether to retry by reading attributes rather
than by inspecting exception types.

Each error also carries a machine-readable ``code`` (from :class:`ErrorCode`),
a human-readable ``message``, the HTTP ``status`` (if any), the Notion
``notion_code`` from the error body, an optional structured ``context`` dict,
and an optional ``cause`` (chained exception).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

class ErrorKind(str, Enum):
    """The variant tag of a classified error."""

    AUTH = "auth"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    NETWORK = "network"
    UNKNOWN = "unknown"


class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the client can raise."""

    AUTH_ERROR = "AUTH_ERROR"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Messages shown to end users, keyed by Notion's error ``code``.
_USER_MESSAGES: dict[str, str] = {
    "object_not_found": "The requested page or database could not be found.",
    "unauthorized": "The integration token is invalid or has been revoked.",
    "restricted_resource": "You do not have permission to access this resource.",
    "insufficient_permissions": "You do not have permission to access this resource.",
    "invalid_request": "The request format is invalid. Please check your input.",
    "validation_error": "The request format is invalid. Please check your input.",
    "conflict_error": "The resource was modified by another user. Please try again.",
    "rate_limited": "Too many requests. Please wait a moment and try again.",
    "internal_server_error": "Notion hit an unexpected error. Please try again later.",
    "service_unavailable": "Notion service is temporarily unavailable. Please try again later.",
}


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class NotionPipeError(Exception):
    """Base exception for all notionpipe errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` identifying the error category.
    message:
        A developer-friendly description of what went wrong.
    kind:
        The :class:`ErrorKind` tag.
    retryable:
        Whether another attempt is permitted for this failure.
    status:
        HTTP status code, or ``None`` when no response was received.
    notion_code:
        The ``code`` field of the Notion error body (may be empty).
    context:
        Arbitrary structured data providing extra diagnostic detail.
    cause:
        The underlying exception, if this error wraps another.
    """

    retry_after: float | None = None

    def __init__(
        self,
        code: str,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        retryable: bool = False,
        status: int | None = None,
        notion_code: str = "",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.kind: ErrorKind = kind
        self.retryable: bool = retryable
        self.status: int | None = status
        self.notion_code: str = notion_code
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def user_message(self) -> str:
        """Return a message suitable for showing to an end user."""
        if self.notion_code in _USER_MESSAGES:
            return _USER_MESSAGES[self.notion_code]
        return self.message or "An unexpected error occurred."

    def _identity(self) -> tuple:
        return (
            type(self),
            self.kind,
            self.status,
            self.notion_code,
            self.message,
            self.retry_after,
            self.context,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NotionPipeError):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        # ``context`` is a dict, so it takes part in equality only.
        return hash(self._identity()[:-1])

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        status = f", status={self.status!r}" if self.status is not None else ""
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"message={self.message!r}{status}{ctx})"
        )


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

class AuthError(NotionPipeError):
    """Notion API returned 401. Never retried."""

    def __init__(
        self,
        message: str,
        status: int | None = 401,
        notion_code: str = "",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.AUTH_ERROR,
            message=message,
            kind=ErrorKind.AUTH,
            retryable=False,
            status=status,
            notion_code=notion_code,
            context=context,
            cause=cause,
        )


class NotFoundError(NotionPipeError):
    """Notion API returned 404. Never retried."""

    def __init__(
        self,
        message: str,
        status: int | None = 404,
        notion_code: str = "object_not_found",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.NOT_FOUND,
            message=message,
            kind=ErrorKind.NOT_FOUND,
            retryable=False,
            status=status,
            notion_code=notion_code,
            context=context,
            cause=cause,
        )


class ValidationError(NotionPipeError):
    """Notion API rejected the request (400, 403 or 422). Never retried.

    Context keys: ``field`` when the body names the offending field.
    """

    def __init__(
        self,
        message: str,
        status: int | None = 400,
        notion_code: str = "",
        field: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            kind=ErrorKind.VALIDATION,
            retryable=False,
            status=status,
            notion_code=notion_code,
            context=context,
            cause=cause,
        )
        self.field: str | None = field


class RateLimitedError(NotionPipeError):
    """Notion API returned 429. Always retryable.

    ``retry_after`` is the server-mandated wait in seconds, or ``None`` when
    the response carried no usable ``Retry-After`` header.
    """

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        notion_code: str = "rate_limited",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.RATE_LIMITED,
            message=message,
            kind=ErrorKind.RATE_LIMITED,
            retryable=True,
            status=429,
            notion_code=notion_code,
            context=context,
            cause=cause,
        )
        self.retry_after = retry_after


class ServerError(NotionPipeError):
    """Notion API returned a 5xx status. Retryable."""

    def __init__(
        self,
        message: str,
        status: int,
        notion_code: str = "",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.SERVER_ERROR,
            message=message,
            kind=ErrorKind.SERVER_ERROR,
            retryable=True,
            status=status,
            notion_code=notion_code,
            context=context,
            cause=cause,
        )


class RequestTimeoutError(NotionPipeError):
    """A single attempt exceeded ``timeout_seconds``. Retryable."""

    def __init__(
        self,
        message: str = "Request timeout",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.TIMEOUT,
            message=message,
            kind=ErrorKind.TIMEOUT,
            retryable=True,
            status=None,
            notion_code="timeout",
            context=context,
            cause=cause,
        )


class NetworkError(NotionPipeError):
    """A transport-level failure occurred (DNS, connection reset). Retryable."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.NETWORK_ERROR,
            message=message,
            kind=ErrorKind.NETWORK,
            retryable=True,
            status=None,
            notion_code="",
            context=context,
            cause=cause,
        )


class UnknownError(NotionPipeError):
    """Any failure that fits no other variant. Not retried."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        notion_code: str = "",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.UNKNOWN_ERROR,
            message=message,
            kind=ErrorKind.UNKNOWN,
            retryable=False,
            status=status,
            notion_code=notion_code,
            context=context,
            cause=cause,
        )
