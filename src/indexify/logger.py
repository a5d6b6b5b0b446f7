"""Loggers for the index management core.

Every module logs through get_logger(__name__), which gives the
"indexify.*" loggers one handler each and stops propagation, so catalog
and vector-store events do not reach an embedding application's root
logger twice. Level and format come from the environment:

    INDEXIFY_LOG_LEVEL   DEBUG, INFO (default), WARNING, ERROR or CRITICAL
    INDEXIFY_LOG_FORMAT  "standard" (default) or "json" for log shippers
"""

import json
import logging
import os
import sys
from typing import Any

LOG_FORMAT_STANDARD = (
    "%(asctime)s.%(msecs)03d - %(levelname)s - %(name)s - %(message)s"
)

LOG_FORMAT_DEBUG = (
    "%(asctime)s.%(msecs)03d - %(levelname)s - "
    "%(filename)s:%(lineno)d - %(name)s:%(funcName)s - %(message)s"
)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_log_level(level: int | str | None) -> int:
    if level is None:
        level_str = os.getenv("INDEXIFY_LOG_LEVEL", "INFO").upper()
        return getattr(logging, level_str, logging.INFO)
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for collectors that index log fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


def _build_formatter(level: int, format_type: str) -> logging.Formatter:
    if format_type == "json":
        return JSONFormatter(datefmt=DATE_FORMAT)
    # DEBUG gets file location in every line
    if level == logging.DEBUG:
        return logging.Formatter(LOG_FORMAT_DEBUG, datefmt=DATE_FORMAT)
    return logging.Formatter(LOG_FORMAT_STANDARD, datefmt=DATE_FORMAT)


def configure_logger(
    name: str,
    level: int | str | None = None,
    format_type: str | None = None,
    handler: logging.Handler | None = None,
) -> logging.Logger:
    """Attach a formatted handler to a logger unless it already has one.

    Args:
        name: Logger name, normally the module's __name__.
        level: Level overriding INDEXIFY_LOG_LEVEL.
        format_type: "standard" or "json", overriding INDEXIFY_LOG_FORMAT.
        handler: Destination handler; stderr when omitted.

    Returns:
        The logger, configured once per process.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    resolved = _resolve_log_level(level)
    logger.setLevel(resolved)

    if format_type is None:
        format_type = os.getenv("INDEXIFY_LOG_FORMAT", "standard").lower()

    if handler is None:
        handler = logging.StreamHandler(sys.stderr)

    handler.setLevel(resolved)
    handler.setFormatter(_build_formatter(resolved, format_type))
    logger.addHandler(handler)

    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the module logger configured from the environment."""
    return configure_logger(name)


def set_log_level(level: int | str) -> None:
    """Change the level of every "indexify.*" logger at runtime.

    Handlers are reformatted too, so switching to DEBUG adds file and line
    information to lines that are already being written.
    """
    resolved = _resolve_log_level(level)
    format_type = os.getenv("INDEXIFY_LOG_FORMAT", "standard").lower()

    for name in list(logging.root.manager.loggerDict):
        if name != "indexify" and not name.startswith("indexify."):
            continue
        logger = logging.getLogger(name)
        logger.setLevel(resolved)
        for handler in logger.handlers:
            handler.setLevel(resolved)
            handler.setFormatter(_build_formatter(resolved, format_type))


def mask_sensitive(value: str, prefix_len: int = 4, suffix_len: int = 4) -> str:
    """Hide the middle of a secret such as a Qdrant API key.

    Values too short to keep both ends are replaced entirely.
    """
    if len(value) <= prefix_len + suffix_len:
        return "***"
    return f"{value[:prefix_len]}***{value[-suffix_len:]}"
