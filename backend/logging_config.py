from __future__ import annotations

import logging
import time
from logging.config import dictConfig

from settings import settings

# `extra=` keys appended to a log line as key=value, in this order
CONTEXT_KEYS = (
    "path",
    "station",
    "page",
    "page_size",
    "start_date",
    "count",
    "parameter",
    "timeout_s",
)

_configured = False


class ContextualFormatter(logging.Formatter):
    converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = " ".join(
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_KEYS
            if getattr(record, key, None) is not None
        )
        if not context:
            return message
        # the traceback, if any, stays below the context suffix
        head, sep, tail = message.partition("\n")
        return f"{head} | {context}{sep}{tail}"


def configure_logging(level: str | int | None = None) -> None:
    """Route all loggers to stderr with UTC timestamps and request context."""
    global _configured
    if _configured:
        return

    log_level = level if level is not None else settings.log_level

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": ContextualFormatter,
                    "fmt": "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "contextual",
                }
            },
            "root": {"handlers": ["default"], "level": log_level},
        }
    )

    _configured = True
