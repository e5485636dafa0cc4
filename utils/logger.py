"""
Shared logger utility for the dynamic pricing engine.
Provides a consistent logger configuration for all modules.
"""

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str | None = None, level: int | str | None = None) -> logging.Logger:
    """
    Returns a logger with the specified name and a standard stream handler.
    The level comes from ``level``, then ``PRICING_LOG_LEVEL``, then INFO.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)
    resolved = level or os.getenv("PRICING_LOG_LEVEL", "INFO")
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    logger.setLevel(resolved)
    return logger
