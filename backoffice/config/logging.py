"""
Logging Configuration for the Back-Office Service

Structured logging with JSON or console output. Every event carries the
service name and environment; request handlers add ``request_id`` through
structlog contextvars. Credentials never reach the log output.
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from backoffice.config.settings import Settings, get_settings

REDACTED = "***"

SENSITIVE_KEYS = frozenset({
    "password",
    "token",
    "refresh_token",
    "refreshToken",
    "authorization",
    "Authorization",
})

# Chatty client libraries, kept at WARNING unless the service runs at DEBUG
QUIET_LOGGERS = ("httpx", "httpcore", "redis")


def redact_credentials(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask credential-bearing fields, including one level of nested mappings."""
    for key, value in list(event_dict.items()):
        if key in SENSITIVE_KEYS and value is not None:
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if k in SENSITIVE_KEYS and v is not None else v
                for k, v in value.items()
            }
    return event_dict


def service_context(settings: Settings):
    """Processor stamping each event with the service name and environment."""
    def add_service(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", settings.app_name)
        event_dict.setdefault("environment", settings.app_env)
        return event_dict
    return add_service


def resolve_level(settings: Settings, log_level: Optional[str] = None) -> int:
    if log_level:
        return getattr(logging, log_level.upper(), logging.INFO)
    if settings.debug:
        return logging.DEBUG
    return getattr(logging, settings.monitoring.log_level.upper(), logging.INFO)


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR); DEBUG
            mode implies DEBUG when no override is given.
    """
    settings = get_settings()
    numeric_level = resolve_level(settings, log_level)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        service_context(settings),
        redact_credentials,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if settings.monitoring.log_format == "json":
        renderer = JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    formatter = ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(console_handler)

    library_level = numeric_level if numeric_level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    # uvicorn.access duplicates RequestLoggingMiddleware
    for logger_name, level in (
        ("uvicorn", numeric_level),
        ("uvicorn.error", numeric_level),
        ("uvicorn.access", logging.WARNING),
    ):
        logger = logging.getLogger(logger_name)
        logger.handlers = []
        logger.propagate = False
        logger.addHandler(console_handler)
        logger.setLevel(level)

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=logging.getLevelName(numeric_level),
        format=settings.monitoring.log_format,
    )