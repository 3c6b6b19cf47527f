"""Logging configuration for the catalogue service."""
import logging
import sys


LOGGER_NAME = "catalog"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Set up the package logger with a single console handler."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child of the package logger."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
