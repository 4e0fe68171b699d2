"""Structured JSON logging configuration."""

import logging
import sys
from pythonjsonlogger import jsonlogger

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

# Level names accepted on the command line, matched case-insensitively
LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
}


def parse_level(level: str) -> int:
    """
    Resolve a logging level name to its numeric value.

    Args:
        level: Level name (Trace, Debug, Info, Warning, Error, Fatal or Panic)

    Returns:
        int: Numeric logging level

    Raises:
        ValueError: If the level name is unknown
    """
    try:
        return LEVELS[level.strip().lower()]
    except (KeyError, AttributeError):
        raise ValueError(f"Invalid logging level '{level}'") from None


def setup_logger(name: str = "klipper_exporter", level: str = "info") -> logging.Logger:
    """
    Configure structured JSON logging.

    Args:
        name: Logger name
        level: Level name, see parse_level

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(parse_level(level))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        timestamp=True
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger
