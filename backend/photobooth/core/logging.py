"""One-JSON-object-per-line logging for the photobooth service."""
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

# Submission context passed through `extra=`; copied into the line when set.
CONTEXT_FIELDS = ("variant", "stage", "response_id", "error_type")

DEFAULT_LEVEL = "INFO"


class JSONFormatter(logging.Formatter):
    """Render a record as timestamp/level/service/message plus submission context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": record.name,
            "message": record.getMessage(),
        }
        payload.update(_context_of(record))
        if record.exc_info and record.exc_info[0] is not None:
            exc_type = record.exc_info[0]
            payload["error_type"] = exc_type.__name__
            payload["error_detail"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


def _level_from_env() -> int:
    name = os.getenv("LOG_LEVEL", DEFAULT_LEVEL).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(service_name: str = "photobooth") -> logging.Logger:
    """Return the named logger writing JSON lines to stdout.

    Safe to call once per module: the stdout handler is attached only the
    first time a given name is configured. The level comes from ``LOG_LEVEL``.
    """
    logger = logging.getLogger(service_name)
    logger.setLevel(_level_from_env())

    if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(JSONFormatter())
        logger.addHandler(stdout_handler)

    return logger
