"""Logging setup shared by all tools."""

import logging
from typing import Optional

from rich.logging import RichHandler

DEFAULT_FORMAT = "%(message)s"


def setup_logger(name: Optional[str] = None, level: str = "INFO") -> logging.Logger:
    """
    Configure a logger with a rich console handler.

    Args:
        name: Logger name (root logger if None)
        level: Log level name, e.g. "DEBUG" or "INFO"

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())

    # Avoid stacking handlers when called more than once
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt="[%X]"))
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""
    return logging.getLogger(name)
