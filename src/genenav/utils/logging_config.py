"""Logging setup with Rich console output."""

import logging

from rich.logging import RichHandler

LOGGER_NAME = "genenav"


def setup_logging(level: str | int = "INFO", enable_console_logging: bool = True) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Log level name or number
        enable_console_logging: Attach a RichHandler to stderr

    Returns:
        The configured ``genenav`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    has_rich = any(isinstance(h, RichHandler) for h in logger.handlers)
    if enable_console_logging and not has_rich:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
        logger.addHandler(handler)
    elif not enable_console_logging:
        for handler in [h for h in logger.handlers if isinstance(h, RichHandler)]:
            logger.removeHandler(handler)

    return logger

