"""
Logging configuration.
Sets up the application loggers for the dashboard and headless runs.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union

# Top-level packages whose module loggers share the same handlers
_PACKAGES = ("generator", "api", "render", "controller", "app")


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure console (and optional file) logging for the client packages.

    Args:
        level: Logging level, e.g. logging.DEBUG or "DEBUG".
        log_file: Optional path to also write logs to.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    handlers: list[logging.Handler] = []
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    for name in _PACKAGES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Streamlit re-executes the script; avoid stacking duplicate handlers
        if logger.hasHandlers():
            logger.handlers.clear()
        for handler in handlers:
            handler.setLevel(level)
            logger.addHandler(handler)
        logger.propagate = False

    logging.getLogger("controller").info("Logging initialized.")
