"""Logging configuration for the k3sctl package."""
import logging
import os
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def default_level() -> int:
    """Level from LOG_LEVEL, INFO when unset or unknown."""
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), None)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(debug_mode: bool = False, level: Optional[int] = None) -> logging.Logger:
    """
    Configure the ``k3sctl`` logger hierarchy.

    Args:
        debug_mode: Force DEBUG level
        level: Explicit level, overrides LOG_LEVEL

    Returns:
        The package logger
    """
    if debug_mode:
        level = logging.DEBUG
    elif level is None:
        level = default_level()

    logger = logging.getLogger("k3sctl")
    logger.setLevel(level)
    logger.propagate = False

    # Replace our handler so it writes to the current stderr
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    logger.addHandler(handler)

    # Disable debug logging for noisy libraries
    if not debug_mode:
        logging.getLogger('kubernetes').setLevel(logging.WARNING)
        logging.getLogger('urllib3').setLevel(logging.WARNING)

    return logger
