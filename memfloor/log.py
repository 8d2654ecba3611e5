"""structlog setup for memfloor."""

import logging
import sys

import structlog

from memfloor.config.models import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    """Configure structlog for the current process.

    Log records always go to stderr; stdout carries only the result line.

    Args:
        config: Logging configuration.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if config.format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.level)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
