import sys
import structlog
import logging
from app.shared.core.config import get_settings

def pii_redactor(logger, method_name, event_dict):
    """
    Redact common PII and sensitive fields from logs.
    Credentials and password material must never reach a log sink.
    """
    pii_fields = {
        "email", "password", "current_password", "new_password", "token",
        "secret", "api_token", "secret_access_key", "client_secret",
        "service_account_key", "password_hash",
    }

    # Redact top-level fields
    for field in pii_fields:
        if field in event_dict:
            event_dict[field] = "[REDACTED]"

    # Redact nested fields in common containers
    for container in ["metadata", "payload", "details", "extra"]:
        if container in event_dict and isinstance(event_dict[container], dict):
            for field in pii_fields:
                if field in event_dict[container]:
                    event_dict[container][field] = "[REDACTED]"

    return event_dict

def setup_logging():
    settings = get_settings()

    # 1. Choose the renderer based on environment
    if settings.DEBUG:
        renderer = structlog.dev.ConsoleRenderer()
        min_level = logging.DEBUG
    else:
        renderer = structlog.processors.JSONRenderer()
        min_level = logging.INFO

    # 2. Configure the "Processors" (The Middleware Pipeline for Logs)
    processors = [
        structlog.contextvars.merge_contextvars, # Support async context
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        pii_redactor,                            # Redact before rendering
        renderer
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # 3. Route stdlib logging (uvicorn, sqlalchemy) to stdout in the same format
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=min_level,
    )


def audit_log(event: str, user_id: str, details: dict = None):
    """
    Standardized helper for security-relevant account events.
    Keeps a consistent schema for log-based auditing.
    """
    logger = structlog.get_logger("audit")
    logger.info(
        "audit_event",
        audit_event=event,
        user_id=str(user_id),
        metadata=details or {},
    )
