"""Structured logging for the CLI and the server.

Structured fields reach a log line two ways: per call, through
``extra={"extra_fields": {...}}``, and per scope, through :class:`LogContext`.
Scoped fields live in a context variable, so concurrent extraction runs (one
asyncio task each, plus the worker threads they start) never see each
other's fields.
"""

import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Type

_scoped_fields: ContextVar[Dict[str, Any]] = ContextVar("mirror_me_log_fields", default={})


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        payload.update(getattr(record, "extra_fields", None) or {})

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(payload, default=str, ensure_ascii=False)


class DetailedFormatter(logging.Formatter):
    """Timestamped text with source location."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class SimpleFormatter(logging.Formatter):
    """Level, logger and message only."""

    def __init__(self) -> None:
        super().__init__(fmt="%(levelname)-8s | %(name)s | %(message)s")


FORMATTERS: Dict[str, Type[logging.Formatter]] = {
    "simple": SimpleFormatter,
    "detailed": DetailedFormatter,
    "json": StructuredFormatter,
}


class ScopedFieldsFilter(logging.Filter):
    """Merge the active :class:`LogContext` fields into each record.

    Per-call ``extra_fields`` win over scoped ones with the same name.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        scoped = _scoped_fields.get()
        if scoped:
            record.extra_fields = {**scoped, **(getattr(record, "extra_fields", None) or {})}
        return True


def setup_logging(
    level: str = "INFO",
    format: str = "simple",
    log_file: Optional[Path] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """Replace the root logger's handlers.

    Console output goes to stderr (stdout carries command output) in the
    requested format; the optional rotating log file always gets JSON lines.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format: Console format (simple, detailed, json)
        log_file: Optional log file path; parent directories are created
        max_file_size_mb: Rotate the log file at this size
        backup_count: Rotated files to keep
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if any(isinstance(f, ScopedFieldsFilter) for f in handler.filters):
            handler.close()

    scoped = ScopedFieldsFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(FORMATTERS.get(format, SimpleFormatter)())
    console.addFilter(scoped)
    root.addHandler(console)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        file_handler.addFilter(scoped)
        root.addHandler(file_handler)

    # Upload parsing is chatty at DEBUG
    for noisy in ("multipart", "python_multipart", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; structured fields are added by the handlers."""
    return logging.getLogger(name)


class LogContext:
    """Attach structured fields to every record logged inside a scope.

    Scopes nest; inner fields shadow outer ones until the inner scope exits.

    Example:
        >>> with LogContext(provider="reddit"):
        ...     logger.info("Extracted record")
    """

    def __init__(self, **fields: Any) -> None:
        self.fields = fields
        self._token = None

    def __enter__(self) -> "LogContext":
        self._token = _scoped_fields.set({**_scoped_fields.get(), **self.fields})
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        _scoped_fields.reset(self._token)

    @staticmethod
    def current() -> Dict[str, Any]:
        """Fields of the innermost active scope."""
        return dict(_scoped_fields.get())
