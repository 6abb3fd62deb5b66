"""Logging setup."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "branchsweep"


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the package namespace."""
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def configure_logging(debug: bool = False) -> logging.Logger:
    """Send package logs to stderr through rich, installing the handler only once."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return logger
