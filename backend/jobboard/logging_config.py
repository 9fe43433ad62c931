"""
Loguru setup shared by the API process and the batch command.
"""

from __future__ import annotations

import sys

from loguru import logger

from jobboard.config import Settings, settings as default_settings

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(settings: Settings | None = None) -> None:
    """Replace loguru's default sink with one honouring LOG_LEVEL / LOG_FORMAT."""
    settings = settings or default_settings
    logger.remove()

    if settings.log_format == "json":
        logger.add(sys.stderr, format="{message}", level=settings.log_level, serialize=True)
    else:
        logger.add(sys.stderr, format=TEXT_FORMAT, level=settings.log_level)
