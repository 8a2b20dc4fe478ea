"""Credential redaction for debug dumps.

:func:`redact` is applied to every request/response dump before it is
written anywhere.  The bearer token never appears in its output:

* values under sensitive keys (``authorization``, ``token``, ``secret`` ...)
  are masked, keeping at most the last four characters of the known token;
* any occurrence of the known token inside other strings is masked;
* ``Bearer <value>`` fragments are masked even when the token is unknown;
* raw ``bytes`` are replaced with ``<binary:N_bytes>``.
"""

from __future__ import annotations

import copy
import re
from typing import Any

# If any of these substrings appear in a key (case-insensitive) the value
# is redacted.
_SENSITIVE_KEY_PATTERNS: frozenset[str] = frozenset({
    "token",
    "secret",
    "password",
    "credential",
    "authorization",
    "cookie",
    "api_key",
    "api-key",
})

_BEARER_RE = re.compile(r"(Bearer\s+)\S+")


def _mask_token(value: str, token: str | None) -> str:
    if token and token in value:
        suffix = token[-4:] if len(token) >= 4 else "****"
        placeholder = f"<redacted:...{suffix}>"
        if token in placeholder:
            placeholder = "<redacted>"
        value = value.replace(token, placeholder)
    return _BEARER_RE.sub(lambda m: f"{m.group(1)}<redacted>", value)


def _redact_value(value: Any, token: str | None) -> Any:
    if isinstance(value, dict):
        return _redact_dict(value, token)
    if isinstance(value, list):
        return [_redact_value(item, token) for item in value]
    if isinstance(value, str):
        return _mask_token(value, token)
    if isinstance(value, (bytes, bytearray)):
        return f"<binary:{len(value)}_bytes>"
    return value


def _redact_dict(d: dict, token: str | None) -> dict:
    result: dict = {}
    for key, value in d.items():
        key_lower = key.lower() if isinstance(key, str) else ""
        if any(pat in key_lower for pat in _SENSITIVE_KEY_PATTERNS):
            result[key] = _mask_token(value, token) if isinstance(value, str) else "<redacted>"
        else:
            result[key] = _redact_value(value, token)
    return result


def redact(payload: dict, token: str | None = None) -> dict:
    """Return a deep copy of *payload* with credentials removed.

    The original *payload* is never mutated.

    >>> redact({"Authorization": "Bearer secret_abc123"})
    {'Authorization': 'Bearer <redacted>'}
    """
    return _redact_dict(copy.deepcopy(payload), token)
