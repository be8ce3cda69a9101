"""Structured logging for random field generation.

Console output is human readable; an optional JSON lines file records
cache hits, misses and basis computations for later inspection.
"""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        payload = {
            "timestamp": time.time(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra_data"):
            payload.update(record.extra_data)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(log_path: Path | None = None, level: int = logging.INFO) -> None:
    """Configure the ``randomfield`` logger hierarchy.

    Args:
        log_path: Optional path for a JSON lines log file
        level: Logging level
    """
    logger = logging.getLogger("randomfield")
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(console_handler)

    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)


def get_logger(name: str) -> "StructuredLogger":
    """Get a structured logger for a module (usually ``__name__``)."""
    return StructuredLogger(logging.getLogger(name))


class StructuredLogger:
    """Wrapper attaching a dict of structured fields to each message."""

    def __init__(self, logger: logging.Logger):
        """Wrap a standard library logger."""
        self.logger = logger

    def _log(self, level: int, msg: str, data: dict[str, Any] | None = None) -> None:
        """Emit ``msg`` with ``data`` attached for the JSON formatter."""
        extra = {"extra_data": data} if data else {}
        self.logger.log(level, msg, extra=extra)

    def debug(self, msg: str, data: dict[str, Any] | None = None) -> None:
        """Debug level log."""
        self._log(logging.DEBUG, msg, data)

    def info(self, msg: str, data: dict[str, Any] | None = None) -> None:
        """Info level log."""
        self._log(logging.INFO, msg, data)

    def warning(self, msg: str, data: dict[str, Any] | None = None) -> None:
        """Warning level log."""
        self._log(logging.WARNING, msg, data)

    def error(self, msg: str, data: dict[str, Any] | None = None) -> None:
        """Error level log."""
        self._log(logging.ERROR, msg, data)


__all__ = [
    "setup_logging",
    "get_logger",
    "StructuredLogger",
    "JSONFormatter",
]
