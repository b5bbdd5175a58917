"""Logging configuration for dreflow."""

import logging

LOGGER_NAME = "dreflow"


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a console handler to the dreflow logger.

    Args:
        level: Log level name, e.g. "INFO"

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    # Clear any existing handlers (in case this is called multiple times)
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level.upper())
    console_handler.setFormatter(logging.Formatter("%(levelname)s - %(name)s - %(message)s"))
    logger.addHandler(console_handler)

    return logger
