"""Structured logging for the ledger API and its services."""
import logging
import sys
from datetime import date
from enum import Enum
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

from config import get_settings

SERVICE_NAME = "container-ledger"

# Loggers that are too chatty at INFO for a request-per-line service
_QUIET_LOGGERS = ("uvicorn.access", "multipart", "python_multipart")


def _add_service_fields(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    settings = get_settings()
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("environment", settings.app_env)
    return event_dict


def _plain_values(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Render enum members (statuses, categories, roles) and dates as plain values."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
        elif isinstance(value, date):
            event_dict[key] = value.isoformat()
    return event_dict


def setup_logging() -> None:
    """
    Configure structlog once for the process.

    Production renders one JSON object per line; development and testing
    use the console renderer (colors off under test).
    """
    settings = get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db_echo else logging.WARNING
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        _add_service_fields,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _plain_values,
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.is_production:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors += [
            structlog.dev.ConsoleRenderer(colors=settings.is_development),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**context: Any) -> None:
    """Attach fields (request_id, principal_id, ...) to every log line of the current request."""
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
