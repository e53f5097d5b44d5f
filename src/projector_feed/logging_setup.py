"""structlog configuration."""

import logging
import sys

import structlog

from projector_feed.config import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    """Configure structlog output according to the logging configuration.

    JSON lines are written for ``log_format="json"``, human readable console
    output for ``"text"``. Events below ``log_level`` are dropped. Logs go to
    stderr so command output on stdout stays machine readable.
    """
    level = logging.getLevelName(config.log_level.upper())

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if config.log_format.lower() == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
