"""
Logging configuration for the dyadsim project.

Usage:
    from configs.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("This will log to the console and optionally backend.log")
"""
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from configs.paths import BASE_DIR

# Log file path
LOG_FILE = BASE_DIR / 'backend.log'

# Set by the server launcher so reloaded worker processes log to the same file
LOG_FILE_ENV = 'DYADSIM_LOG_FILE'

ROOT_LOGGER_NAME = 'dyad_tools'

# Module-level flag to track if logging has been configured
_logging_configured = False


def setup_logging(
    level: int | str | None = None,
    log_file: Path | str | None = None,
    console: bool = True,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level, numeric or name (default: LOG_LEVEL env var, else INFO)
        log_file: Path to log file (default: DYADSIM_LOG_FILE env var, else no file)
        console: Whether to also log to console (default: True)
    """
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = os.getenv('LOG_LEVEL', 'INFO')
    if log_file is None:
        log_file = os.getenv(LOG_FILE_ENV) or None

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = logging.Formatter(
        fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module name.

    Automatically sets up logging if not already configured.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance, always a child of the ``dyad_tools`` logger

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Simulating %d frames", n_steps)
    """
    if not _logging_configured:
        setup_logging()

    if name.startswith(ROOT_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')


def log_separator(logger: logging.Logger, title: str = '') -> None:
    """Log a visual separator line for readability."""
    if title:
        logger.info('=' * 20 + f' {title} ' + '=' * 20)
    else:
        logger.info('=' * 50)
