"""JSON log lines for notionsource.

Site builds usually run unattended in CI, so every record is written as one
JSON object per line.  A truncated fetch then shows up as a single
greppable entry::

    {"ts": "2025-07-01T12:00:00.123456+00:00", "level": "WARNING",
     "logger": "notionsource.fetch", "message": "Pagination truncated",
     "op": "paginate", "resource": "block", "resource_id": "abc123",
     "pages": 1, "items": 100, "error_code": "NETWORK_ERROR"}

Structured fields travel in ``extra={"extra_fields": {...}}``::

    from notionsource.observability import get_logger

    log = get_logger("notionsource.fetch")
    log.info("Records fetched", extra={"extra_fields": {"records": 12}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

DEFAULT_LOGGER = "notionsource"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return logging.getLevelName(level.upper())
    return level


class StructuredFormatter(logging.Formatter):
    """Render a :class:`logging.LogRecord` as a single JSON line.

    ``ts``, ``level``, ``logger`` and ``message`` always come first; the
    record's ``extra_fields`` follow, then ``exception`` / ``stack_info``
    when the record carries them.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "extra_fields", None) or {})

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


_configured: set[str] = set()


def get_logger(
    name: str = DEFAULT_LOGGER,
    *,
    level: int | str = logging.DEBUG,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Return the JSON logger called *name*, configuring it on first use.

    Parameters
    ----------
    name:
        Logger name, conventionally ``"notionsource.<module>"``.
    level:
        Threshold applied the first time *name* is configured.  Accepts a
        level number or a case-insensitive level name.
    stream:
        Handler output.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        The logger.  Later calls with the same *name* return it unchanged.
    """
    logger = logging.getLogger(name)
    if name in _configured:
        return logger

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.setLevel(_resolve_level(level))
    # parent handlers would print every record twice
    logger.propagate = False

    _configured.add(name)
    return logger
