"""Structured logging for textlens.

structlog renders every record, including those emitted through stdlib
loggers by uvicorn, SQLAlchemy and httpx. Output is one JSON object per line
by default, or a console rendering when APP_LOG_FORMAT=text. The current
request ID is attached to each record while a request is being handled.
"""

import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone

import structlog
from structlog.types import EventDict, Processor

from textlens.core.config import get_settings

SERVICE_NAME = "textlens"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

# Chatty libraries that only log useful detail at debug level
NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite", "sqlalchemy.engine")

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Get the request ID bound to the current context."""
    return request_id_ctx.get()


def set_request_id(request_id: str) -> Token[str | None]:
    """Bind a request ID to the current context.

    Returns the token needed to restore the previous value.
    """
    return request_id_ctx.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    request_id_ctx.reset(token)


def add_request_id(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add an ISO 8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def add_service_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["service"] = SERVICE_NAME
    return event_dict


def _build_renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _quiet_noisy_loggers(log_level: int, *, echo_sql: bool) -> None:
    floor = max(log_level, logging.WARNING)
    for name in NOISY_LOGGERS:
        if name == "sqlalchemy.engine" and echo_sql:
            continue
        logging.getLogger(name).setLevel(floor)


def configure_logging() -> None:
    """Configure structlog and route stdlib logging through it.

    Safe to call more than once; the root handler's formatter is replaced
    rather than stacked.
    """
    settings = get_settings()
    log_level = LOG_LEVELS.get(settings.app_log_level, logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        add_service_info,
        add_request_id,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _build_renderer(settings.app_log_format),
        ],
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)

    _quiet_noisy_loggers(log_level, echo_sql=settings.database_echo)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger; pass the module's ``__name__``."""
    return structlog.get_logger(name)
