"""
Structured Logging for the service board.
Outputs one JSON object per line on stdout.
"""

import json
import sys
import logging
from datetime import datetime, timezone

LOGGER_NAME = "ServiceBoard"

# LogRecord internals; everything else on a record came in through `extra`
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _jsonable(value):
    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


class JsonFormatter(logging.Formatter):
    """Render a record and its extra fields as a JSON line."""

    def format(self, record):
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
        }
        payload.update(
            (key, _jsonable(value))
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith('_')
        )
        return json.dumps(payload, ensure_ascii=False)


logger = logging.getLogger(LOGGER_NAME)
logger.setLevel(logging.INFO)
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(JsonFormatter())
logger.addHandler(handler)


def set_level(level: str | int) -> None:
    """Set the package log level (e.g. "DEBUG", logging.WARNING)."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)


def get_logger(component: str = "BOARD"):
    return BoardLogger(component)


class BoardLogger:
    """Component-tagged facade; keyword arguments become structured fields."""

    def __init__(self, component):
        self.component = component
        self.logger = logging.getLogger(LOGGER_NAME)

    def _log(self, level, msg, item_id, fields):
        extra = {"component": self.component, **fields}
        if item_id:
            extra["item_id"] = item_id
        self.logger.log(level, msg, extra=extra, stacklevel=3)

    def debug(self, msg, item_id=None, **kwargs):
        self._log(logging.DEBUG, msg, item_id, kwargs)

    def info(self, msg, item_id=None, **kwargs):
        self._log(logging.INFO, msg, item_id, kwargs)

    def warning(self, msg, item_id=None, **kwargs):
        self._log(logging.WARNING, msg, item_id, kwargs)

    def error(self, msg, item_id=None, **kwargs):
        self._log(logging.ERROR, msg, item_id, kwargs)
