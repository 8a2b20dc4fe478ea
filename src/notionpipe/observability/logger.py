"""Structured JSON logger for notionpipe.

Each record is emitted as one JSON line, e.g.::

    {"ts": "2026-10-19T12:00:00.123456+00:00", "level": "WARNING",
     "logger": "notionpipe.executor", "message": "Retrying request",
     "op": "request", "method": "POST", "path": "/search", "attempt": 1,
     "kind": "rate_limited", "delay": 5.0}

Structured fields are passed with ``extra={"extra_fields": {...}}``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys are ``ts``, ``level``, ``logger`` and ``message``.
    ``extra_fields`` are merged into the top-level object; exception and
    stack info are serialised when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if extra_fields is not None:
            log_entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(log_entry, default=str)


# One handler per logger name, so repeated ``get_logger`` calls are idempotent.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "notionpipe",
    *,
    level: int | str = logging.DEBUG,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Pipeline components use ``"notionpipe.<component>"``
        (``notionpipe.executor``, ``notionpipe.queue``), each with its own
        handler.
    level:
        Minimum log level, as an ``int`` (``logging.WARNING``) or a
        case-insensitive name (``"warning"``).  Defaults to ``DEBUG`` so the
        queue's pacing messages are not dropped at the source.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        A non-propagating logger with one :class:`StructuredFormatter`
        handler.  Calling again with the same *name* returns that logger
        unchanged; *level* and *stream* of later calls are ignored.
    """
    logger = logging.getLogger(name)

    if name not in _configured_loggers:
        resolved_level = (
            logging.getLevelName(level.upper())
            if isinstance(level, str)
            else level
        )
        logger.setLevel(resolved_level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

        _configured_loggers.add(name)

    return logger
