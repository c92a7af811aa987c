"""Structured logging configuration for SmartMark.

- JSON structured logging with StructuredFormatter
- Logger hierarchy under the smartmark namespace
- Environment variable control (SMARTMARK_LOG_LEVEL, SMARTMARK_LOG_FORMAT)
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

__all__ = ["SENSITIVE_KEYS", "StructuredFormatter", "TextFormatter", "configure_logging"]

# Keys redacted in log output
SENSITIVE_KEYS = {
    "password", "token", "secret", "apikey", "api_key",
    "authorization", "credential", "auth", "key", "bearer",
    "x-api-key", "x-goog-api-key",
}

_STANDARD_FIELDS = {
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
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter.

    Outputs logs in JSON format with:
    - timestamp: UTC ISO 8601 format with 'Z' suffix
    - level: Log level name (INFO, ERROR, etc.)
    - logger: Logger name (smartmark hierarchy)
    - message: Log message (a snake_case event name)
    - context: Extras dict merged from LogRecord attributes

    Sensitive keys (api_key, token, authorization, ...) are redacted.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            k: ("[REDACTED]" if k.lower() in SENSITIVE_KEYS else v)
            for k, v in record.__dict__.items()
            if k not in _STANDARD_FIELDS and not k.startswith("_")
        }

        if extras:
            log_data["context"] = extras

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter, used when SMARTMARK_LOG_FORMAT=text."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure structured logging for all smartmark loggers.

    Args:
        level: Optional log level override. If not provided, uses
               SMARTMARK_LOG_LEVEL environment variable (default: INFO).

    Environment Variables:
        SMARTMARK_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR). Default: INFO
        SMARTMARK_LOG_FORMAT: Output format (json, text). Default: json
    """
    if level is None:
        level = os.getenv("SMARTMARK_LOG_LEVEL", "INFO")

    log_level = getattr(logging, level.upper(), logging.INFO)

    log_format = os.getenv("SMARTMARK_LOG_FORMAT", "json").lower()

    if log_format == "text":
        formatter = TextFormatter()
    else:
        formatter = StructuredFormatter()

    logger = logging.getLogger("smartmark")
    logger.setLevel(log_level)

    # Only add a handler once so repeated calls do not duplicate output
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
