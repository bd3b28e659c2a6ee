"""Logging setup shared by the API server and the seed script."""

import logging
import sys

from backend.core import config

LOG_FORMAT = "%(asctime)s [%(levelname).1s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger with a single stderr handler.

    Calling it again replaces the handler instead of stacking a second one.
    """
    level_name = (level or config.LOG_LEVEL).upper()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name, logging.INFO))


def ensure_logging() -> None:
    """Run ``setup_logging`` unless the root logger already has handlers."""
    if not logging.getLogger().handlers:
        setup_logging()
