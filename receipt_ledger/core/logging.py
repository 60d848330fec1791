"""
Loguru configuration for the receipt ledger service.

Console logging is always on. A rotating file sink is added when LOG_FILE is set.
"""

import sys

from loguru import logger

from .config import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level> | {extra}"
)


def setup_logging(level: str | None = None):
    """
    Configure loguru sinks from settings.

    Args:
        level: Override for LOG_LEVEL

    Returns:
        The configured loguru logger
    """
    level = (level or settings.log_level).upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=CONSOLE_FORMAT,
        serialize=settings.log_json,
        backtrace=False,
    )

    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
            serialize=settings.log_json,
        )
        logger.info("File logging enabled", log_file=settings.log_file)

    return logger
