"""Loguru sink setup for applications embedding the hook engine."""

import sys
from typing import Optional

from loguru import logger

from .config import config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(level: Optional[str] = None, sink=None) -> int:
    """Replace loguru's default handler with one at the configured level.

    Args:
        level: Minimum level to emit (defaults to config.LOG_LEVEL)
        sink: Destination for records (defaults to stderr)

    Returns:
        The loguru handler id, usable with ``logger.remove``.
    """
    logger.remove()
    return logger.add(
        sink if sink is not None else sys.stderr,
        level=(level or config.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
