"""structlog setup for the Galuxium pipeline service.

One processor chain serves both structlog loggers and stdlib loggers
(uvicorn, httpx, SQLAlchemy) through `ProcessorFormatter`. Every line carries
the request's correlation id and, inside a pipeline run, the run fields bound
with `bind_run_context`. Provider errors can embed whole response bodies, so
long string fields are clipped before rendering.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

MAX_FIELD_CHARS = 2000
CLIPPED_FIELDS = ("error", "raw", "raw_output", "detail")

NOISY_LOGGERS = {
    "uvicorn.access": "WARNING",
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "aiosqlite": "WARNING",
}


def add_correlation_id(logger, method, event_dict):
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def clip_long_fields(logger, method, event_dict):
    """Cut oversized model/provider text so one failure can't flood the log."""
    for key in CLIPPED_FIELDS:
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > MAX_FIELD_CHARS:
            event_dict[key] = f"{value[:MAX_FIELD_CHARS]}...[+{len(value) - MAX_FIELD_CHARS} chars]"
    return event_dict


def configure_structlog(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Install the shared processor chain.

    Must run before other galuxium imports create loggers: structlog caches
    the chain on first use.

    Args:
        log_level: Root log level ("DEBUG", "INFO", "WARNING", "ERROR")
        json_logs: JSON lines when True, colored console output when False
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        clip_long_fields,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["stdout"], "level": log_level},
        "loggers": {name: {"level": level} for name, level in NOISY_LOGGERS.items()},
    })

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_run_context(**values) -> None:
    """Bind pipeline-run fields (idea_id, owner_id) to every log line in this task.

    structlog contextvars are per asyncio task, so concurrent runs never see
    each other's fields. None values are skipped.
    """
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v is not None})


def clear_run_context() -> None:
    structlog.contextvars.clear_contextvars()
