"""
JSON-lines logging for the invoice kernel and the import engine.

Every module logs through ``get_logger(<area>)``; records end up under the
``invoice_kernel`` logger and are written one JSON object per line. Batch
identity travels in LogContext (contextvars), so an event logged deep in a
resolver still carries the batch's correlation_id and the invoice number
being assembled without passing them down explicitly.

Payload keys:
    ts, level, logger, message      always
    correlation_id, actor_id,       when bound in LogContext
    producer, invoice_number
    <extra keys>                    from ``extra={...}``
    exc_type, exc_message,          when exc_info is given; kernel
    exc_code, exc_<attr>, traceback exceptions add their code and attributes
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, Iterator
from uuid import UUID

LOGGER_NAMESPACE = "invoice_kernel"

_CONTEXT_FIELDS = ("correlation_id", "actor_id", "producer", "invoice_number")

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"invoice_log_{name}", default=None) for name in _CONTEXT_FIELDS
}


def _context_var(name: str) -> ContextVar[str | None]:
    try:
        return _context_vars[name]
    except KeyError:
        raise ValueError(
            f"Unknown log context field {name!r}; expected one of {', '.join(_CONTEXT_FIELDS)}"
        ) from None


class LogContext:
    """Batch-scoped fields merged into every log record of the current context."""

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set fields for the rest of the current context. None leaves a field as is."""
        for name, value in fields.items():
            if value is not None:
                _context_var(name).set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            name: value
            for name, var in _context_vars.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields inside a ``with`` block; previous values come back on exit."""
        tokens = [
            (var, var.set(value))
            for var, value in ((_context_var(n), v) for n, v in fields.items())
            if value is not None
        ]
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _jsonable(value: Any) -> Any:
    """Money, ids and dates are logged as strings."""
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
        fields["exc_field"] = getattr(exc, "field", None)
    for attr, value in vars(exc).items():
        if not attr.startswith("_"):
            fields[f"exc_{attr}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(
            {k: _jsonable(v) for k, v in payload.items()},
            default=str,
        )


def get_logger(name: str) -> logging.Logger:
    """Logger for one area of the code, e.g. ``get_logger("ingestion.assembler")``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_configure_lock = threading.Lock()
_configured = False


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the ``invoice_kernel`` logger.

    Only the first call has an effect until reset_logging() is called.
    ``level`` may be a number or a level name such as "DEBUG".
    """
    global _configured
    with _configure_lock:
        if _configured:
            return
        _configured = True

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())

    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.setLevel(level.upper() if isinstance(level, str) else level)
    namespace.propagate = False
    namespace.addHandler(handler)


def reset_logging() -> None:
    """Drop the handler installed by configure_logging(). Used by tests."""
    global _configured
    with _configure_lock:
        _configured = False
    namespace = logging.getLogger(LOGGER_NAMESPACE)
    namespace.handlers.clear()
    namespace.setLevel(logging.WARNING)
