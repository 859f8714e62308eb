"""Structured logging for scopedb.

Every module logs through ``logging.getLogger(__name__)``; this module only
decides how those records are rendered. ``configure_logging`` installs a
console handler with either a plain or a JSON formatter on the ``scopedb``
logger.

Stored values can hold user data, so they are logged through
``scrub_for_log`` which keeps only their shape.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

ROOT_LOGGER_NAME = "scopedb"

PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# LogRecord attributes that are not caller-supplied extras
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


def payload_scrubber(text: str, max_length: int = 50, mask_char: str = "*") -> str:
    """Shorten text for safe logging, masking the middle of long values."""
    if not text:
        return "[empty]"

    clean = re.sub(r"[\n\r\t]+", " ", text)
    if len(clean) > max_length:
        visible_chars = max_length // 2
        return (
            f"{clean[:visible_chars]}{mask_char * 3}[{len(clean)} chars]"
            f"{mask_char * 3}{clean[-visible_chars:]}"
        )
    return clean


def scrub_for_log(value: Any, max_length: int = 50) -> str:
    """Convert any value to a log-safe string describing its shape.

    Strings are shortened; containers are reduced to their size.
    """
    if value is None:
        return "[none]"
    if isinstance(value, str):
        return payload_scrubber(value, max_length)
    if isinstance(value, (int, float, bool)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return f"[{type(value).__name__}:{len(value)} items]"
    if isinstance(value, dict):
        return f"[dict:{len(value)} keys]"
    return f"[{type(value).__name__}]"


class JSONFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def configure_logging(
    level: int | str = logging.INFO,
    *,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Attach a console handler to the ``scopedb`` logger.

    Calling it again replaces the handler it installed before, so the CLI
    and tests can reconfigure freely.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_scopedb_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler._scopedb_handler = True  # type: ignore[attr-defined]
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
