"""Loguru sink configuration."""

import sys

from loguru import logger

from gallery.core.config import Settings


def setup_logging(settings: Settings) -> None:
    """Replace the default sink with one at the configured level."""
    level = "DEBUG" if settings.debug else settings.log_level.upper()
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
    )
