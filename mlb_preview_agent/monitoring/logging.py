"""Structured logging configuration using structlog.

Two render modes:
- "production": one JSON object per line, for log aggregation
- "development": coloured, human-readable console lines

Usage:
    from mlb_preview_agent.monitoring import configure_logging, get_logger

    configure_logging("production")
    log = get_logger()
    log.info("schedule_fetched", date="2025-07-04", games=1)
    log.warning("weather_unavailable", game_pk=745123, error=str(e))
"""

import logging
import sys

import structlog


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(mode: str = "development", level: int = logging.INFO) -> None:
    """Configure structlog for the application.

    Call once at process start (CLI entry point, service bootstrap, tests).

    Args:
        mode: "production" for JSON output, anything else for console output
        level: stdlib logging level for the root handler
    """
    if mode == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[*_shared_processors(), renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Logs go to stderr so CLI output on stdout stays clean
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (defaults to caller's module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def bind_correlation_id(correlation_id: str) -> None:
    """Attach a correlation ID to every log event in the current context.

    Args:
        correlation_id: Identifier for one preview request
    """
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def unbind_correlation_id() -> None:
    """Remove the correlation ID from the current context."""
    structlog.contextvars.unbind_contextvars("correlation_id")
