"""
Logging setup for enzymeml-llm.

All modules log through children of the ``enzymeml_llm`` logger. The
library itself never installs handlers on import; applications (and the
CLI) call ``setup_logging()``.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from .config.settings import LoggingSettings


ROOT_LOGGER = "enzymeml_llm"

_EXTRA_FIELDS = (
    "call_id",
    "tool_name",
    "attempt",
    "duration_ms",
    "event_type",
    "model",
    "database",
    "url",
)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str)


def setup_logging(settings: LoggingSettings | None = None) -> logging.Logger:
    """Setup structured logging with JSON or text format."""
    settings = settings or LoggingSettings.from_env()
    level = getattr(logging, settings.log_level, logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if settings.log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))

    logger.addHandler(handler)
    return logger
