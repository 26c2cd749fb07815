"""JSON logging for the address book service.

Service operations run inside :func:`log_context`, and :class:`ContextFilter`
copies the active ``operation`` and ``contact_id`` onto every record emitted
meanwhile, so the formatter needs no per-call ``extra``.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any, Mapping

from address_book.core.config import Settings

# attributes every LogRecord carries; anything else came from ``extra`` or the filter
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_EMPTY: Mapping[str, Any] = MappingProxyType({})
_context: ContextVar[Mapping[str, Any]] = ContextVar("address_book_log_context", default=_EMPTY)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach ``fields`` to log records emitted inside the block."""
    merged = {**_context.get(), **{key: value for key, value in fields.items() if value is not None}}
    token = _context.set(MappingProxyType(merged))
    try:
        yield
    finally:
        _context.reset(token)


class ContextFilter(logging.Filter):
    """Copy the current :func:`log_context` fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JSONLogFormatter(logging.Formatter):
    """Format log records as JSON strings."""

    def __init__(self, app_env: str) -> None:
        super().__init__()
        self.app_env = app_env

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "environment": self.app_env,
        }
        log_record.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRIBUTES
        )
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        # validation error contexts may hold exceptions
        return json.dumps(log_record, ensure_ascii=False, default=str)


def configure_logging(settings: Settings) -> None:
    """Send application and uvicorn logs through one JSON handler."""
    handler = logging.StreamHandler()
    handler.setFormatter(JSONLogFormatter(settings.app_env))
    handler.addFilter(ContextFilter())

    logging.basicConfig(level=settings.log_level, handlers=[handler], force=True)

    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.propagate = False
        uvicorn_logger.setLevel(settings.log_level)
