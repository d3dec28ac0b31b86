"""Structured JSON logging for cinelingo.

Every module logs through a child of the ``cinelingo`` logger. Records are
written as one JSON object per line to a rotating file and to stderr.
Values pushed with :func:`log_context` (a video or subtitle id, for instance)
are attached to every record emitted while the context is active.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Iterator, Optional

LOGGER_NAME = "cinelingo"
DEFAULT_LOG_LEVEL = logging.INFO
LOG_DIR = Path(os.environ.get("CINELINGO_LOG_DIR") or Path(__file__).resolve().parents[1] / "log")
LOG_FILE = LOG_DIR / "cinelingo.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 5

ContextToken = contextvars.Token

_logger: Optional[logging.Logger] = None
_log_context: contextvars.ContextVar[Dict[str, object]] = contextvars.ContextVar(
    "cinelingo_log_context", default={}
)

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_STANDARD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JSONLogFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    DEFAULT_FIELDS: tuple[str, ...] = (
        "correlation_id",
        "video_id",
        "subtitle_id",
        "event",
        "duration_ms",
        "status",
    )

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pid": record.process,
            "thread": record.threadName,
        }
        extra: Dict[str, object] = {}
        for key, value in vars(record).items():
            if key in self.DEFAULT_FIELDS:
                if value is not None:
                    payload[key] = value
            elif key not in _STANDARD_ATTRIBUTES:
                extra[key] = value
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class LogContextFilter(logging.Filter):
    """Copy the active log context onto records that do not set the key already."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def _build_handlers() -> list[logging.Handler]:
    handlers: list[logging.Handler] = [
        RotatingFileHandler(LOG_FILE, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS),
        logging.StreamHandler(),
    ]
    formatter = JSONLogFormatter()
    context_filter = LogContextFilter()
    for handler in handlers:
        handler.setFormatter(formatter)
        # Logger-level filters do not run for records from child loggers.
        handler.addFilter(context_filter)
    return handlers


def setup_logging(log_level: int = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Attach the JSON handlers to the ``cinelingo`` logger once."""

    global _logger
    if _logger is None:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger = logging.getLogger(LOGGER_NAME)
        logger.propagate = False
        for handler in _build_handlers():
            logger.addHandler(handler)
        _logger = logger
    configure_logging_level(log_level=log_level)
    return _logger


def get_logger() -> logging.Logger:
    return _logger if _logger is not None else setup_logging()


def configure_logging_level(debug_enabled: bool = False, log_level: Optional[int] = None) -> int:
    """Apply ``log_level`` (or DEBUG/INFO from ``debug_enabled``) to the logger and handlers."""

    level = log_level if log_level is not None else (logging.DEBUG if debug_enabled else DEFAULT_LOG_LEVEL)
    logger = get_logger()
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
    return level


def get_log_context() -> Dict[str, object]:
    return dict(_log_context.get())


def push_log_context(**values: object) -> ContextToken:
    """Merge non-``None`` ``values`` into the log context and return a reset token."""

    merged = {**_log_context.get(), **{key: value for key, value in values.items() if value is not None}}
    return _log_context.set(merged)


def pop_log_context(token: ContextToken) -> None:
    _log_context.reset(token)


@contextlib.contextmanager
def log_context(**values: object) -> Iterator[None]:
    token = push_log_context(**values)
    try:
        yield
    finally:
        pop_log_context(token)


def clear_log_context() -> None:
    _log_context.set({})


__all__ = [
    "JSONLogFormatter",
    "LogContextFilter",
    "clear_log_context",
    "configure_logging_level",
    "get_log_context",
    "get_logger",
    "log_context",
    "pop_log_context",
    "push_log_context",
    "setup_logging",
]
