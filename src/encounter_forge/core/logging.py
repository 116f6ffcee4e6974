"""Structured logging configuration for Encounter Forge.

Logging goes through structlog so every generation step can carry
structured fields (strategy, XP, counts) that render either as a readable
console line during development or as JSON in production.

Records from the standard library (urllib3, requests) are routed through
the same processor chain with ``structlog.stdlib.ProcessorFormatter``, so
console and log file output look alike whichever library emitted them.
The optional log file is always written as JSON lines.

Each CLI command runs inside :func:`request_context`, which tags every
entry with the command name and a short request id.

Example:
    >>> from encounter_forge.core.logging import get_logger, request_context
    >>> logger = get_logger(__name__)
    >>> with request_context(command="encounter"):
    ...     logger.info("Encounter generated", strategy="single", adjusted_xp=450)
"""

from __future__ import annotations

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger


APP_NAME = "encounter_forge"

# Third-party loggers that only matter when something goes wrong
QUIET_LOGGERS = ("urllib3", "requests")


def add_app_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every log entry with the application name."""
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(json_format: bool) -> Processor:
    if json_format:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def _formatter(json_format: bool) -> structlog.stdlib.ProcessorFormatter:
    """Formatter that renders stdlib and structlog records alike."""
    final: list[Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if json_format:
        final.append(structlog.processors.format_exc_info)
    final.append(_renderer(json_format))
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=final,
    )


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
) -> None:
    """Configure application-wide logging.

    structlog events are handed to the standard library root logger, whose
    handlers do the rendering: one on stderr (console or JSON), and a JSON
    file handler when ``log_file`` is given. Stdout is left to the CLI.

    Args:
        level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        json_format: Render stderr output as JSON instead of console lines.
        log_file: Optional path of a JSON lines log file.

    Example:
        >>> configure_logging(level="DEBUG", json_format=False)
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(_formatter(json_format))
    handlers: list[logging.Handler] = [stderr_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(_formatter(json_format=True))
        handlers.append(file_handler)

    remove_handlers()
    root = logging.getLogger()
    for handler in handlers:
        handler.set_name(APP_NAME)
        handler.setLevel(numeric_level)
        root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def remove_handlers() -> None:
    """Detach and close the root handlers installed by configure_logging."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == APP_NAME:
            root.removeHandler(handler)
            handler.close()


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind values to every following log entry until cleared.

    Example:
        >>> bind_context(environment="Forest", target_xp=450)
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop every bound context value."""
    structlog.contextvars.clear_contextvars()


@contextmanager
def request_context(**kwargs: Any) -> Iterator[str]:
    """Tag the log entries of one request with a fresh request id.

    The values, plus ``request_id``, are bound for the duration of the
    block and removed afterwards; anything bound before is left alone.

    Yields:
        The request id.
    """
    request_id = uuid.uuid4().hex[:8]
    with structlog.contextvars.bound_contextvars(request_id=request_id, **kwargs):
        yield request_id


__all__ = [
    "APP_NAME",
    "configure_logging",
    "remove_handlers",
    "get_logger",
    "bind_context",
    "clear_context",
    "request_context",
]
