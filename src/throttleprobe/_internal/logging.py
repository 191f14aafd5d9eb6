"""Structured logging setup for ThrottleProbe."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime


class _JsonFormatter(logging.Formatter):
    """Structured JSON log formatter.

    Emits one-line JSON objects with keys: timestamp, level, logger, message.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            A single-line JSON string.
        """
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def setup_logging(
    level: int = logging.INFO,
    *,
    json_format: bool = False,
    access_log: bool = False,
) -> logging.Logger:
    """Configure and return the root ThrottleProbe logger.

    Installs a single stderr handler on the ``throttleprobe`` namespace.
    Calling it again only updates the level of the existing handler.

    Args:
        level: Logging level (e.g., ``logging.DEBUG``). Defaults to INFO.
        json_format: If True, emit structured JSON logs. If False, emit
            human-readable logs.
        access_log: If True, also route ``aiohttp.access`` records (one per
            request served by the demo target) through the same handler.

    Returns:
        The configured ``throttleprobe`` root logger.
    """
    logger = logging.getLogger("throttleprobe")
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)

        if json_format:
            formatter: logging.Formatter = _JsonFormatter()
        else:
            formatter = logging.Formatter(
                "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )

        handler.setFormatter(formatter)
        logger.addHandler(handler)

        # Keep records out of the root logger
        logger.propagate = False

    if access_log:
        _attach_access_log(logger.handlers[0], level)

    return logger


def _attach_access_log(handler: logging.Handler, level: int) -> None:
    access = logging.getLogger("aiohttp.access")
    access.setLevel(level)
    if handler not in access.handlers:
        access.addHandler(handler)
    access.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``throttleprobe`` namespace.

    Args:
        name: Logger name, appended to ``throttleprobe.`` prefix.
            Example: ``get_logger("engine.worker")`` returns
            ``logging.getLogger("throttleprobe.engine.worker")``.

    Returns:
        A child logger.
    """
    return logging.getLogger(f"throttleprobe.{name}")
