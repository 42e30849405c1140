"""One JSON object per log line, tagged with the app role and correlation id.

Events pass their structured data as ``extra={"extra_fields": {...}}``;
those keys are merged into the line but never replace the base keys.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from .correlation import get_correlation_id

_BASE_KEYS = ("timestamp", "level", "logger", "role", "message")


class JsonFormatter(logging.Formatter):
    def __init__(self, role: str | None = None) -> None:
        super().__init__()
        self.role = role or os.environ.get("APP_ROLE", "public")

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "role": self.role,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            line["correlationId"] = correlation_id

        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)

        for key, value in getattr(record, "extra_fields", {}).items():
            if key not in _BASE_KEYS:
                line[key] = value

        return json.dumps(line, default=str)


def _level() -> int:
    level = logging.getLevelName(os.environ.get("LOG_LEVEL", "INFO").upper())
    # getLevelName returns a string for unknown names
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Logger writing JSON lines to stdout, level from LOG_LEVEL."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(_level())
        logger.propagate = False

    return logger
