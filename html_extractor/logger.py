"""
Logging configuration for the HTML extractor.
"""

import logging
import sys
from typing import Optional, Union

from .config import ExtractorSettings


def setup_logger(
    name: str = "html_extractor",
    level: Optional[Union[int, str]] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and return a logger instance.

    Args:
        name: Logger name
        level: Logging level as a number or a level name (default:
            HTML_EXTRACTOR_LOG_LEVEL from the environment, else INFO)
        log_file: Optional file path for logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is None:
        level = ExtractorSettings.from_env().log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    # Calling again only changes the level; handlers are attached once
    if logger.handlers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.setLevel(level)

    # Format: timestamp - module - level - message
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # stderr keeps stdout free for command line output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


# Default logger instance, created once at import time
logger = setup_logger()


def get_module_logger(module_name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Child loggers (e.g. "html_extractor.grammar") share the package logger's
    handlers and level, and their name shows which stage produced a message.

    Args:
        module_name: Name of the module (e.g., 'grammar', 'extractor')

    Returns:
        Child logger instance
    """
    return logging.getLogger(f"html_extractor.{module_name}")
