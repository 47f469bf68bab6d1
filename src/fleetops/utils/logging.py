"""Logging for FleetOps.

structlog renders every event; stdlib logging routes the rendered lines to
stdout and, unless ``LOG_DIR`` is empty, to a rotating file. Command
handlers bind the order they work on so each line of a request carries
``order_id`` and ``company_id``.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

_LEVELS_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "test": "WARNING",
}

# Framework loggers that flood DEBUG output
_QUIET_LOGGERS = ("protean", "asyncio", "sqlalchemy.engine", "uvicorn.access")


def _environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def log_level() -> str:
    return os.getenv("LOG_LEVEL") or _LEVELS_BY_ENV.get(_environment(), "DEBUG")


def drop_unset_context(logger, method_name, event_dict):
    """Remove bound context keys that were never given a value."""
    return {key: value for key, value in event_dict.items() if value is not None}


def _handlers(level: str) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    log_dir = os.getenv("LOG_DIR", "logs")
    if log_dir:
        Path(log_dir).mkdir(exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=Path(log_dir) / "fleetops.log",
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setLevel(level)
    return handlers


def _rendering() -> list:
    if _environment() in ("production", "staging"):
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    console = structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
    )
    return [console]


def configure_logging() -> None:
    """Route stdlib logging and configure structlog on top of it."""
    level = log_level()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = _handlers(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            drop_unset_context,
            *_rendering(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_order_context(order_id: str, company_id: str | None = None, **kwargs) -> None:
    """Bind the order being processed to every subsequent log line of this request."""
    structlog.contextvars.bind_contextvars(order_id=order_id, company_id=company_id, **kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
