"""
Structured logging configuration for statetree.

Records from the "statetree" logger hierarchy are written as JSON with a
store_id field, so records from several stores in one process can be told
apart. The root logger is left alone.

Environment Variables:
    STATETREE_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    STATETREE_LOG_FORMAT: Log format (json, text) - default: json

Usage:
    from statetree.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, store_id="store-1")
    logger.info("Installed modules")
"""

import logging
import os
import sys
from typing import IO, Optional

from pythonjsonlogger import jsonlogger

LOGGER_NAME = "statetree"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _json_formatter() -> logging.Formatter:
    return jsonlogger.JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s %(store_id)s %(error_type)s",
        rename_fields={"asctime": "timestamp", "name": "logger", "levelname": "level"},
    )


def _text_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s %(levelname)-7s %(name)s [%(store_id)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def setup_logging(
    level: Optional[str] = None,
    fmt: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Attach one handler to the "statetree" logger.

    Args:
        level: Overrides STATETREE_LOG_LEVEL (unknown names fall back to INFO)
        fmt: Overrides STATETREE_LOG_FORMAT ("json" or "text")
        stream: Output stream (default: stderr, keeping stdout for command output)

    Returns:
        The configured "statetree" logger
    """
    level_name = (level or os.getenv("STATETREE_LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.getenv("STATETREE_LOG_FORMAT", "json")).lower()
    resolved = getattr(logging, level_name) if level_name in _LEVELS else logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)
    for old in logger.handlers[:]:
        logger.removeHandler(old)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(resolved)
    handler.addFilter(StoreIdFilter())
    handler.setFormatter(_json_formatter() if fmt == "json" else _text_formatter())
    logger.addHandler(handler)
    return logger


def get_logger(name: str, store_id: Optional[str] = None) -> logging.LoggerAdapter:
    """
    Get a logger carrying store_id on every record.

    Args:
        name: Logger name (typically __name__)
        store_id: Identifier of the store emitting the records

    Returns:
        LoggerAdapter with store_id in extra fields
    """
    return _StoreLoggerAdapter(logging.getLogger(name), {"store_id": store_id or "N/A"})


class _StoreLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges per-call extra fields with the adapter's."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


class StoreIdFilter(logging.Filter):
    """Fill store_id and error_type on records that were not logged through an adapter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "store_id"):
            record.store_id = "N/A"  # type: ignore
        if not hasattr(record, "error_type"):
            record.error_type = None  # type: ignore
        return True
