"""
Structured JSON logging for the costs kernel.

Every record leaving the ``costs_kernel`` logger tree is one JSON object:
timestamp, level, logger and message, then the bound cost context (who is
looking at which work item) and any ``extra`` fields.  Kernel exceptions
also contribute their ``code`` and structured attributes.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "LOGGER_NAMESPACE",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any
from uuid import UUID

LOGGER_NAMESPACE = "costs_kernel"

CONTEXT_FIELDS = ("correlation_id", "user_id", "project_id", "work_item_id")

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("costs_log_context", default=_EMPTY)


class LogContext:
    """Request-scoped fields stamped onto every record; async-safe."""

    @staticmethod
    def current() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """Layer ``fields`` over the current context for one block.

        Values are stringified; None values and names outside
        CONTEXT_FIELDS are ignored.
        """
        merged = dict(_context.get())
        merged.update(
            (name, str(value))
            for name, value in fields.items()
            if name in CONTEXT_FIELDS and value is not None
        )
        token = _context.set(MappingProxyType(merged))
        try:
            yield
        finally:
            _context.reset(token)


# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    return repr(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    fields.update(
        (f"exc_{name}", value)
        for name, value in vars(exc).items()
        if not name.startswith("_") and name != "code"
    )
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON line per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS:
                payload.setdefault(name, value)
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_jsonable)


def get_logger(name: str) -> logging.Logger:
    """Child logger of the costs_kernel namespace."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_STRUCTURED_MARK = "_costs_structured"
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
    replace: bool = False,
) -> logging.Handler:
    """Install the JSON handler on the costs_kernel logger.

    A second call is a no-op returning the installed handler unless
    ``replace`` is set, in which case the installed handler is swapped out
    and ``level`` applied again.
    """
    root = logging.getLogger(LOGGER_NAMESPACE)
    with _lock:
        installed = [h for h in root.handlers if getattr(h, _STRUCTURED_MARK, False)]
        if installed and not replace:
            return installed[0]
        for old in installed:
            root.removeHandler(old)
        new = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        new.setFormatter(StructuredFormatter())
        setattr(new, _STRUCTURED_MARK, True)
        root.addHandler(new)
        root.setLevel(level)
        root.propagate = False
    return new
