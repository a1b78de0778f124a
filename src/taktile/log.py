# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Logging setup for the taktile command line.

Library modules only emit through ``loguru.logger``; sinks are installed
here, once, by the entry point.
"""

from __future__ import annotations

import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | {message}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name} | {message}"

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Install the stderr sink and, optionally, a file sink.

    Args:
        level: Minimum level, one of LOG_LEVELS (case-insensitive).
        log_file: Optional file path for log output.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=CONSOLE_FORMAT)

    if log_file:
        logger.add(log_file, level=level.upper(), format=FILE_FORMAT)

    logger.debug("Logging initialized at {} level", level.upper())
