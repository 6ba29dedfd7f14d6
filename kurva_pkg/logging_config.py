"""Logging setup for Kurva.

Every module logs through a child of the ``kurva`` logger. Nothing is emitted
until ``setup_logging`` attaches a handler; library callers that never call it
get the standard ``logging`` last-resort behaviour.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from typing import TextIO

ROOT_LOGGER = "kurva"


class StructuredFormatter(logging.Formatter):
    """One line per record: ``[timestamp] [LEVEL] logger: message``."""

    def __init__(self, timestamps: bool = True) -> None:
        super().__init__()
        self.timestamps = timestamps

    def format(self, record: logging.LogRecord) -> str:
        message = f"[{record.levelname}] {record.name}: {record.getMessage()}"
        if self.timestamps:
            message = f"{datetime.fromtimestamp(record.created).isoformat()} {message}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def setup_logging(
    level: str | int = "INFO",
    stream: TextIO | None = None,
    timestamps: bool = True,
) -> logging.Logger:
    """Attach a single stream handler to the ``kurva`` logger.

    Calling it again replaces the previous handler, so repeated CLI runs in
    one process do not duplicate output.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR) or numeric level
        stream: Destination, ``sys.stderr`` at call time when omitted
        timestamps: Prefix each line with an ISO timestamp

    Returns:
        The configured ``kurva`` logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    # Records stop here; the host application's root handlers stay untouched
    logger.propagate = False

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(StructuredFormatter(timestamps=timestamps))
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Module logger under the ``kurva`` namespace, e.g. ``kurva.parser``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
