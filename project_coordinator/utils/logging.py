"""
Logging utilities for the coordinator
stdout carries protocol frames, so every handler writes to stderr
"""

import logging
import sys
from typing import Optional

from ..config import CoordinatorConfig

LOGGER_NAME = "project_coordinator"


def setup_logging(config: Optional[CoordinatorConfig] = None, name: str = LOGGER_NAME) -> logging.Logger:
    """
    Setup logging for the server

    Args:
        config: Coordinator configuration (defaults apply when omitted)
        name: Logger name (default: package logger)

    Returns:
        Configured logger instance
    """
    config = config or CoordinatorConfig()
    logger = logging.getLogger(name)

    if not config.enable_logging:
        logger.setLevel(logging.CRITICAL)
        return logger

    level = logging.DEBUG if config.debug else logging.INFO
    logger.setLevel(level)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        fmt='[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(handler)

    return logger
