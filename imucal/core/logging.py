"""
Logging setup for imucal.

Named components (detectors, generators) log through structlog with their name
bound as context; infrastructure modules use the standard logging module.
Both end up on the stdlib root logger configured here.
"""

import logging
import sys
from typing import Union

import structlog

from .config import BaseConfig, LogLevel


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level for the root logger, as a number or a level name
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Set up stdlib logging
    logging.basicConfig(
        format="%(message)s",
        level=level,
        stream=sys.stdout,
    )


def setup_logging_from_config(config: BaseConfig) -> None:
    """
    Configure logging from application settings.

    Args:
        config: Settings providing `log_level`. `debug` forces DEBUG.
    """
    level = LogLevel.DEBUG if config.debug else config.log_level
    setup_logging(level.value)
