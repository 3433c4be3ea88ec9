"""Logging and observability configuration using Pydantic Logfire.

All modules should use Python's standard logging library (logging.getLogger(__name__)),
and Logfire will automatically capture and enrich these logs.

Standard usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Message", extra={"key": "value"})

Structured logging utilities:
    log_with_context(logger, "info", "Message", work_item_id="123", project_id="abc")
"""

import logging

import logfire

from src.core.config import Settings, settings


def configure_logfire(app_settings: Settings | None = None) -> None:
    """Configure Pydantic Logfire with token from environment.

    Nothing is sent unless a token is configured; spans still wrap service calls locally.
    """
    app_settings = app_settings or settings
    logfire.configure(
        token=app_settings.logfire_token,
        service_name="plane-bulk",
        service_version="0.1.0",
        environment=app_settings.environment,
        send_to_logfire="if-token-present",
    )

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def span(name: str, **attributes: object) -> logfire.LogfireSpan:
    """Create a custom span for service layer functions.

    Usage:
        with span("bulk_update_service.bulk_update", project_id=project_id):
            # Your service logic here
            pass
    """
    return logfire.span(name, **attributes)


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
        **context: Additional context fields (work_item_id, project_id, batch_size, etc.)

    Usage:
        log_with_context(logger, "info", "Work item updated", work_item_id="123", project_id="p1")
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)
