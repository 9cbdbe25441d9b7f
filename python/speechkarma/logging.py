"""structlog setup for the API process.

Every line is one JSON object carrying the request context bound by
RequestIDMiddleware (request_id, path, method, and user_id once the viewer
is known). Forbidden keys are scrubbed before rendering; see
speechkarma.services.redact.

Usage:
    from speechkarma.logging import get_logger

    logger = get_logger(__name__)
    logger.info("statement.created", statement_id=str(statement.id))
"""

import logging
import sys

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, get_contextvars

from speechkarma.services.redact import scrub_forbidden_keys

QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def configure_logging(json_format: bool = True, level: int | str = logging.INFO) -> None:
    """Route structlog and stdlib logging through one stdout handler.

    Args:
        json_format: JSON lines when True, coloured console output otherwise.
        level: Root log level, as a number or a name such as "INFO".
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        scrub_forbidden_keys,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer = (
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_context(
    request_id: str | None,
    user_id: str | None = None,
    path: str | None = None,
    method: str | None = None,
) -> None:
    """Bind request fields for every log line emitted in this context.

    None values are skipped so a later call can add user_id without
    clobbering path and method.
    """
    fields = {"request_id": request_id, "user_id": user_id, "path": path, "method": method}
    bind_contextvars(**{key: value for key, value in fields.items() if value is not None})


def clear_request_context() -> None:
    clear_contextvars()


def get_request_id() -> str | None:
    """The request ID bound for the current request, if any."""
    return get_contextvars().get("request_id")
