"""Structured console logging for the weather CLI."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

from .redaction import sanitize_for_logging, sanitize_text

# Optional attributes passed through ``extra=`` that are copied into each line.
CONTEXT_FIELDS = ("session_id", "city", "generation")


class JsonConsoleFormatter(logging.Formatter):
    """One JSON object per line, carrying query context when present."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = sanitize_for_logging(value)
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, ensure_ascii=False, default=str)


class SessionContextFilter(logging.Filter):
    """Stamp every record with the CLI run's session id."""

    def __init__(self, session_id: str) -> None:
        super().__init__()
        self.session_id = session_id

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "session_id", None) is None:
            record.session_id = self.session_id
        return True


def setup_logger(
    name: str = "city_weather",
    level: int | str = logging.INFO,
    *,
    session_id: str | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the package logger to write JSON lines to stderr."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(JsonConsoleFormatter())
        logger.addHandler(handler)

    if session_id is not None:
        for existing in list(logger.filters):
            if isinstance(existing, SessionContextFilter):
                logger.removeFilter(existing)
        logger.addFilter(SessionContextFilter(session_id))
    return logger
