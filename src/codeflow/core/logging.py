"""Structured logging for CodeFlow.

Configures structlog for JSON output in production and coloured console
output during development. Context bound with ``LoggingContext`` (for
example the acting user) is merged into every entry emitted in its scope.
"""

import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from codeflow.core.config import Settings, get_settings


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the logger name to the entry, falling back to ``codeflow``.

    ``structlog.stdlib.add_logger_name`` does not work with ``PrintLogger``.
    """
    event_dict["logger"] = logger.name if hasattr(logger, "name") else "codeflow"
    return event_dict


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename structlog's ``event`` key to ``message``."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _renderer(settings: Settings) -> Processor:
    if settings.is_development or settings.log_format == "console":
        return structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.JSONRenderer()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structured logging for the application.

    Args:
        settings: Optional settings instance. If not provided, will load from environment.
    """
    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level)
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        rename_message_field,
        _renderer(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=settings.is_production,
    )

    # Third-party libraries (SQLAlchemy, aiosqlite) log through stdlib logging
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    if not settings.db_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name. If not provided, uses 'codeflow'.

    Returns:
        BoundLogger: Configured structured logger instance.
    """
    return structlog.get_logger(name or "codeflow")


class LoggingContext:
    """Context manager binding key-value pairs to every log entry in scope.

    Example:
        with LoggingContext(user_id="u-123"):
            logger.info("Snippet saved")  # includes user_id
    """

    def __init__(self, **kwargs: str) -> None:
        self.context = kwargs

    def __enter__(self) -> "LoggingContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())


def bind_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation id to the logging context and return it.

    A new ``cid_`` prefixed id is generated when none is given.
    """
    correlation_id = correlation_id or f"cid_{uuid.uuid4().hex[:12]}"
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
    return correlation_id


def clear_context() -> None:
    """Clear all context variables from the current logging context."""
    structlog.contextvars.clear_contextvars()
