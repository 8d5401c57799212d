"""Structured Logging for declval

Library loggers are structlog wrappers around stdlib loggers in the
``declval.*`` namespace, so nothing is emitted until the host application
configures logging. configure_logging() is provided for applications and
scripts that want the same colored/JSON output setup in one call.
"""
import logging
import sys

import structlog
from structlog.types import EventDict, Processor

from declval.config import get_settings

_library_processors: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.stdlib.render_to_log_kwargs,
]


def _drop_color_message_key(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Drop internal structlog key that's added for colored console output."""
    event_dict.pop("_color_message", None)
    return event_dict


def get_shared_processors() -> list[Processor]:
    """Processors applied to every record before rendering."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _drop_color_message_key,
    ]


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Route stdlib logging (and so every declval logger) through structlog renderers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); settings.LOG_LEVEL when omitted
        json_logs: If True, output JSON lines. If False, colored console output; settings.LOG_JSON when omitted
    """
    settings = get_settings()
    level = settings.LOG_LEVEL if level is None else level
    json_logs = settings.LOG_JSON if json_logs is None else json_logs
    log_level = getattr(logging, level.upper(), logging.INFO)

    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=get_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level)
    logging.getLogger("declval").setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger bound to the stdlib logger ``name``.

    Args:
        name: Logger name (typically __name__ from the calling module)
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_library_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
    )


class LoggerRegistry:
    """Registry of loggers for the package's domains."""

    _loggers: dict[str, structlog.stdlib.BoundLogger] = {}

    @classmethod
    def get(cls, name: str) -> structlog.stdlib.BoundLogger:
        if name not in cls._loggers:
            cls._loggers[name] = get_logger(f"declval.{name}")
        return cls._loggers[name]


def schema_logger() -> structlog.stdlib.BoundLogger:
    """Logger for definition-time events (rules applied to classes)."""
    return LoggerRegistry.get("schema")


def validation_logger() -> structlog.stdlib.BoundLogger:
    """Logger for validation outcomes."""
    return LoggerRegistry.get("validation")
