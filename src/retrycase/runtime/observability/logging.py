"""Logging setup for the retrycase logger hierarchy.

Every module logs through logging.getLogger("retrycase.<area>"). This
module attaches one handler to the "retrycase" logger with either a
human-readable or a JSON formatter, driven by LoggingSettings.

Example:
    >>> from retrycase.runtime.observability import configure_logging
    >>> configure_logging(level="DEBUG")             # text, to stderr
    >>> configure_logging(format="json")             # one JSON object per line
    # Or: RETRYCASE_LOG_LEVEL=DEBUG RETRYCASE_LOG_FORMAT=json
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Literal, TextIO

from retrycase.foundation.config import get_settings

ROOT_LOGGER = "retrycase"

# Marks the handler we installed so reconfiguration replaces it
_HANDLER_ATTR = "_retrycase_handler"


class JsonFormatter(logging.Formatter):
    """Format records as single-line JSON objects."""

    def __init__(self, include_timestamps: bool = True) -> None:
        super().__init__()
        self.include_timestamps = include_timestamps

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if self.include_timestamps:
            entry["timestamp"] = datetime.fromtimestamp(record.created, UTC).isoformat()
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _text_formatter(include_timestamps: bool) -> logging.Formatter:
    fmt = "%(levelname)s [%(name)s] %(message)s"
    return logging.Formatter(f"%(asctime)s {fmt}" if include_timestamps else fmt)


def configure_logging(
    level: str | int | None = None,
    format: Literal["json", "text"] | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install (or replace) the retrycase log handler.

    Args:
        level: Log level name or number (default: settings.logging.level)
        format: "text" or "json" (default: settings.logging.format)
        stream: Output stream (default: stderr)

    Returns:
        The configured "retrycase" logger
    """
    settings = get_settings().logging
    logger = logging.getLogger(ROOT_LOGGER)

    for existing in [h for h in logger.handlers if getattr(h, _HANDLER_ATTR, False)]:
        logger.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stderr)
    setattr(handler, _HANDLER_ATTR, True)
    if (format or settings.format) == "json":
        handler.setFormatter(JsonFormatter(settings.include_timestamps))
    else:
        handler.setFormatter(_text_formatter(settings.include_timestamps))

    logger.addHandler(handler)
    logger.setLevel(level if level is not None else settings.level)
    return logger
