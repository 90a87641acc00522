"""
Structured logging for Kilroy.

Every module logs through structlog with snake_case event names and keyword
context. Audit, error and security events go to dedicated named loggers so
they can be filtered apart from ordinary module logs.
"""

import logging
import os
import sys
from typing import Any

import structlog

PERFORMANCE_LOGGER = "kilroy.performance"
USER_ACTION_LOGGER = "kilroy.user_actions"
ERROR_LOGGER = "kilroy.errors"
SECURITY_LOGGER = "kilroy.security"


def get_log_level() -> int:
    """LOG_LEVEL as a logging constant; INFO when unset or unknown."""
    return logging.getLevelNamesMapping().get(os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


def build_processors(development: bool) -> list[Any]:
    """
    Processor chain for structlog.

    Args:
        development: Render for a human at a terminal instead of as JSON lines

    Returns:
        list: Processors ending in the renderer
    """
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    if development:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_structured_logging() -> None:
    """Route structlog through the stdlib root logger on stderr."""
    from .config import is_development

    log_level = get_log_level()
    development = is_development()

    logging.basicConfig(level=log_level, format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(log_level)

    structlog.configure(
        processors=build_processors(development),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    get_logger("kilroy.logging").info(
        "logging_configured",
        log_level=logging.getLevelName(log_level),
        environment="development" if development else "production",
    )


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def log_performance(operation: str, duration: float, **context: Any) -> None:
    """
    Log how long an operation took.

    Args:
        operation: Name of the operation
        duration: Duration in seconds
        **context: Additional context information
    """
    get_logger(PERFORMANCE_LOGGER).info("performance_metric", operation=operation, duration_seconds=duration, **context)


def log_user_action(action: str, **context: Any) -> None:
    """
    Log user actions for the audit trail.

    Kilroy has no user accounts, so actions are keyed by what happened and
    where (place_id, circle) rather than by who.
    """
    get_logger(USER_ACTION_LOGGER).info("user_action", action=action, **context)


def log_error(error: Exception, context: dict[str, Any] | None = None) -> None:
    error_context = {"error_type": type(error).__name__, "error_message": str(error), **(context or {})}
    get_logger(ERROR_LOGGER).error("error_occurred", **error_context, exc_info=error)


def log_security_event(event_type: str, **context: Any) -> None:
    """Log verification bypasses, rejected challenges and circle coercion."""
    get_logger(SECURITY_LOGGER).warning("security_event", event_type=event_type, **context)
