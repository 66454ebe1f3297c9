"""
Logging configuration for tmx2qml.
"""

import logging
import os
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s : %(levelname)-8s : %(message)s"
DATE_FORMAT = "%H:%M:%S"
LOG_LEVEL_ENV = "TMX2QML_LOG_LEVEL"


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name for terminal output."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        formatted = super().format(record)

        # Color only the level name
        if record.levelname in formatted:
            formatted = formatted.replace(
                record.levelname, f"{color}{record.levelname}{reset}", 1
            )

        return formatted


def resolve_level(level: Optional[Union[int, str]] = None) -> int:
    """Explicit level, else $TMX2QML_LOG_LEVEL, else INFO."""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level
    # Only real level names count; logging also has non-level attributes
    resolved = getattr(logging, level.upper(), None)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Optional[Union[int, str]] = None) -> None:
    """
    Attach a console handler to the tmx2qml and tmx_manager loggers.

    Calling it again replaces the handler instead of adding a second one.
    """
    stream = sys.stderr
    if stream.isatty():
        formatter: logging.Formatter = ColoredFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    else:
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    resolved = resolve_level(level)
    for name in ("tmx2qml", "tmx_manager"):
        project_logger = logging.getLogger(name)
        project_logger.handlers.clear()
        project_logger.addHandler(handler)
        project_logger.setLevel(resolved)
        project_logger.propagate = False

    # Suppress DEBUG logs from noisy libraries
    logging.getLogger("PIL").setLevel(logging.INFO)

    logging.getLogger(__name__).debug(
        f"Logging initialized at {logging.getLevelName(resolved)}"
    )
