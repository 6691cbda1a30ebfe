"""
Structured JSON logging for the settlement kernel.

Every record under the ``settlement_kernel`` logger is written as one JSON
line.  The orchestrator binds the correlation id, business and actor of
the running unit of work; those fields appear on every line logged inside
it.
"""

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any, Iterator

_LOGGER_PREFIX = "settlement_kernel"


class LogContext:
    """Per-operation log fields, carried in context variables."""

    _vars: dict[str, ContextVar[str | None]] = {
        name: ContextVar(f"settlement_{name}", default=None)
        for name in ("correlation_id", "business_id", "actor_id")
    }

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set known fields.  ``None`` values and unknown names are ignored."""
        for name, value in fields.items():
            var = cls._vars.get(name)
            if var is not None and value is not None:
                var.set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            name: var.get()
            for name, var in cls._vars.items()
            if var.get() is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in cls._vars.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore them."""
        tokens = [
            (cls._vars[name], cls._vars[name].set(value))
            for name, value in fields.items()
            if name in cls._vars and value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord has; anything else came from ``extra=``
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    # UUID, Decimal and anything else
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            # SettlementKernelError subclasses expose a code and their fields
            code = getattr(exc, "code", None)
            if code is not None:
                payload["exc_code"] = code
            for key, value in vars(exc).items():
                if not key.startswith("_") and key not in ("args", "code"):
                    payload[f"exc_{key}"] = value
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """Logger named ``settlement_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_lock = threading.Lock()


def _is_ours(handler: logging.Handler) -> bool:
    return getattr(handler, "_settlement_kernel", False)


def configure_logging(
    *,
    level: int = logging.INFO,
    handler: logging.Handler | None = None,
) -> None:
    """
    Install the JSON handler on the ``settlement_kernel`` logger.

    Only the first call has an effect until reset_logging() runs; the
    installed handler is tagged so later calls can find it.
    """
    root = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        if any(_is_ours(h) for h in root.handlers):
            return
        h = handler if handler is not None else logging.StreamHandler(sys.stderr)
        h.setFormatter(StructuredFormatter())
        h._settlement_kernel = True
        root.setLevel(level)
        root.propagate = False
        root.addHandler(h)


def reset_logging() -> None:
    """Remove all handlers from the ``settlement_kernel`` logger.  Tests only."""
    root = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        root.handlers.clear()
        root.setLevel(logging.WARNING)
