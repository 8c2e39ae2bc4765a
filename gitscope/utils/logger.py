"""Structured logging for gitscope using structlog."""

import logging
import os

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    log_format: str | None = None,
    level: str | int | None = None,
    colors: bool | None = None,
) -> None:
    """Route stdlib logging and structlog through one pretty/JSON renderer.

    Arguments override the GITSCOPE_LOG_FORMAT / GITSCOPE_LOG_LEVEL /
    GITSCOPE_LOG_COLORS environment variables. Safe to call more than once.
    """
    if log_format is None:
        log_format = os.getenv("GITSCOPE_LOG_FORMAT", "pretty")
    log_format = log_format.lower()

    if level is None:
        level = os.getenv("GITSCOPE_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if colors is None:
        colors = os.getenv("GITSCOPE_LOG_COLORS", "true").lower() in ("true", "1", "yes", "on")

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors)

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
            ],
        )
    )

    root = logging.getLogger("gitscope")
    root.handlers = [handler]
    root.setLevel(level)
    root.propagate = False

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a structlog logger namespaced under ``gitscope``."""
    return structlog.get_logger(f"gitscope.{name}")
