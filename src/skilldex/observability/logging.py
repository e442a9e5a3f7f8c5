"""Structured logging setup."""

import logging

import structlog


def configure_logging(level: str = "INFO", json: bool = False):
    """
    Configure structlog for the process.

    Args:
        level: Minimum log level name (e.g. "INFO", "DEBUG")
        json: Render JSON lines instead of the console renderer
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
