"""Logging setup driven by the ``log_level`` / ``log_format`` config fields."""

from __future__ import annotations

import json
import logging
import sys

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Loggers owned by this project; anything else is left alone.
_ROOT_LOGGERS = ("sitepulse", "sitepulse_core")

# Handler installed by the last configure_logging() call.
_installed_handler: logging.Handler | None = None


class JsonFormatter(logging.Formatter):
    """One JSON object per record. Multi-line messages stay a single line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    level: str = "info",
    fmt: str = "text",
    stream=None,
) -> logging.Handler:
    """Attach a single stream handler to the project loggers.

    Calling this again replaces the handler installed by the previous call.
    Returns the handler so callers can detach it.
    """
    global _installed_handler

    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    numeric = _LEVELS.get(level.lower(), logging.INFO)
    for name in _ROOT_LOGGERS:
        logger = logging.getLogger(name)
        if _installed_handler is not None:
            logger.removeHandler(_installed_handler)
        logger.addHandler(handler)
        logger.setLevel(numeric)
    _installed_handler = handler
    return handler
