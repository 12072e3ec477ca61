"""Logging and observability configuration using Pydantic Logfire.

All modules use Python's standard logging library (logging.getLogger(__name__)),
and Logfire captures and enriches these logs once configured.

Standard usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Message", extra={"key": "value"})

Structured logging utilities:
    log_with_context(logger, "info", "Message", task_id="123", phase="categorizing")
"""

import logging

import logfire

from signal2noise.core.config import Settings, settings


def configure_logfire(app_settings: Settings | None = None) -> None:
    """Configure Pydantic Logfire and route standard logging through it.

    Telemetry is only shipped when a token is configured; otherwise spans and
    logs stay local.
    """
    app_settings = app_settings or settings
    logfire.configure(
        token=app_settings.logfire_token,
        service_name="signal2noise",
        service_version="0.1.0",
        environment=app_settings.environment,
        send_to_logfire="if-token-present",
    )
    logging.basicConfig(level=app_settings.log_level.upper(), handlers=[logfire.LogfireLoggingHandler()])

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def span(name: str) -> logfire.LogfireSpan:
    """Create a custom span for service layer functions.

    Usage:
        with span("workflow.sort_my_day"):
            # Your service logic here
            pass
    """
    return logfire.span(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: object,
) -> None:
    """Log a message with structured context fields.

    Args:
        logger: Logger instance to use
        level: Log level ("debug", "info", "warning", "error", "critical")
        message: Log message
        **context: Additional context fields (task_id, path, operation, etc.)

    Usage:
        log_with_context(logger, "info", "Task categorized", task_id="123", bucket="signal")
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)
