"""
Structured logging for tagorm.

Modules log through :func:`get_logger`; an application (or the CLI) picks
the output format once with :func:`configure_logging`.

Processor chain::

    merge_contextvars        values bound by LogContext (e.g. table=)
    add_log_level
    TimeStamper (ISO)        optional
    service.name
    ECS field names          JSON output only
    JSONRenderer | ConsoleRenderer

The logger name is bound as the ``logger`` key when the logger is created,
so the chain works with structlog's plain ``PrintLogger``.

Statement echo:
    The executor logs every statement before running it::

        logger.info("statement", sql="SELECT users.id FROM users ", args=[])

    Set ``TAGORM_ECHO_STATEMENTS=false`` to silence it.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger
from structlog._config import BoundLoggerLazyProxy


def _service_name(service: str) -> Processor:
    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add_service


def _ecs_field_names(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename ``timestamp`` and ``level`` to their ECS names."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "tagorm",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog output for the process.

    ``json_format=None`` picks JSON when stdout is not a terminal.
    """
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
    ]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors.append(_service_name(service))

    if json_format:
        processors += [_ecs_field_names, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    # Module-level loggers must pick up a later reconfiguration.
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Logger with ``logger=<name>`` bound (usually ``get_logger(__name__)``)."""
    if name is None:
        return structlog.get_logger()
    return BoundLoggerLazyProxy(None, initial_values={"logger": name})


class LogContext:
    """Bind structlog context variables for the duration of a block.

    Example:
        with LogContext(table="users"):
            logger.info("table_created")  # includes table="users"
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> LogContext:
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context)


__all__ = ["configure_logging", "get_logger", "LogContext"]
