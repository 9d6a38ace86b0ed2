"""
Package logger for relax.

Modules log through ``get_logger(__name__)``. Everything under the ``relax``
logger goes to stderr at WARNING by default, so cache, limiter and token
debug events stay quiet until ``set_level("DEBUG")`` is called.
"""

import logging
import sys
from typing import Union

PACKAGE_NAME = "relax"
LOG_FORMAT = "%(levelname)s - %(name)s - %(message)s"


def _package_logger() -> logging.Logger:
    package_logger = logging.getLogger(PACKAGE_NAME)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.WARNING)
        package_logger.propagate = False
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a relax module, installing the package handler on first use."""
    _package_logger()
    return logging.getLogger(name)


def set_level(level: Union[int, str]) -> None:
    """
    Set the level of every relax logger.

    Args:
        level: A ``logging`` level number or a level name such as ``"debug"``

    Raises:
        ValueError: If ``level`` names no known level
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")
    _package_logger().setLevel(level)
