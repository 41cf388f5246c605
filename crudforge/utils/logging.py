"""
Logging Configuration

One JSON object per line in production, plain text lines everywhere else.
Request-scoped values (path, method, status) are passed through `extra=`
and end up as top-level keys of the JSON record.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

# Attributes of a record that are copied into JSON output when present
_EXTRA_FIELDS = ("resource", "path", "method", "status_code", "duration_ms")

# Third-party loggers that are too chatty at INFO
_NOISY_LOGGERS = ("uvicorn.access", "pymongo")

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        payload.update(
            (field, getattr(record, field)) for field in _EXTRA_FIELDS if hasattr(record, field)
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure the root logger.

    Replaces any handlers already installed, so calling it again (a second
    app in the same process, the CLI) reconfigures instead of duplicating
    output. `stream` defaults to stdout.
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; use with `__name__`."""
    return logging.getLogger(name)
