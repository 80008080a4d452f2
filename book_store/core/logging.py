"""Logging configuration for the application."""
import copy
import logging
import sys

LOGGER_NAME = "book_store"


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        # Color a copy so other handlers still see the plain record
        record = copy.copy(record)
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]
        record.levelname = f"{color}{record.levelname}{reset}"
        record.name = f"\033[34m{record.name}{reset}"  # Blue for logger name
        return super().format(record)


def setup_logging(level: str = "INFO", colored: bool = True) -> logging.Logger:
    """Set up the application logger.

    Replaces any handlers already attached, so calling it again (for example
    from the CLI after the app module configured defaults) just reconfigures.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    if colored:
        formatter: logging.Formatter = ColoredFormatter(fmt, datefmt="%H:%M:%S")
    else:
        formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
