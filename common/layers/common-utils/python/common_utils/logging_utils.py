"""Logger factory shared by the forwarder Lambda and its layers."""

import logging
import os
import json

__all__ = ["configure_logger"]

_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, _DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Return a logger configured with a standard formatter.

    The log level can be overridden via the ``LOG_LEVEL`` environment variable.
    When ``LOG_JSON`` is ``true`` logs are formatted as JSON.
    """
    logger = logging.getLogger(name)

    log_level = os.getenv("LOG_LEVEL") or level
    level_const = getattr(logging, str(log_level).upper(), logging.INFO)
    logger.setLevel(level_const)

    handler = logging.StreamHandler()
    json_flag = os.getenv("LOG_JSON") or "false"
    if str(json_flag).lower() == "true":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s", _DATE_FORMAT
        )
    handler.setFormatter(formatter)
    if not logger.handlers:
        logger.addHandler(handler)
    return logger
