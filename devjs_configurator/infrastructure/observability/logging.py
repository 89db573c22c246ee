"""Logging utilities for devjs-configurator.

The configurator runs inside other processes (module runners, CLIs), so it
never configures the root logger on import. ``configure_logging`` is meant for
entry points; library code only calls ``get_logger`` and ``log_context``.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Fields attached to every record formatted in the current task.
_fields: ContextVar[dict[str, Any]] = ContextVar("devjs_log_fields", default={})

_handler: logging.Handler | None = None


class ContextualFormatter(logging.Formatter):
    """Formatter that appends the current ``log_context`` fields as ``[k=v ...]``."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        fields = _fields.get()
        if not fields:
            return message
        return "%s [%s]" % (message, " ".join(f"{k}={v}" for k, v in fields.items()))


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach ``fields`` to log lines emitted inside the block.

    Nested blocks add to the outer fields. Each asyncio task works on its own
    copy, so concurrent ``configure`` calls keep their module names apart.
    """
    token = _fields.set({**_fields.get(), **fields})
    try:
        yield
    finally:
        _fields.reset(token)


def current_log_context() -> dict[str, Any]:
    """Return a copy of the fields currently attached to log lines."""
    return dict(_fields.get())


class StderrHandler(logging.StreamHandler):
    """Stream handler that writes to whatever ``sys.stderr`` is at emit time."""

    def __init__(self) -> None:
        super().__init__(sys.stderr)

    @property  # type: ignore[override]
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, _value) -> None:
        pass


def configure_logging(level: int = logging.INFO) -> None:
    """Send log lines to stderr with context fields, at ``level`` and above.

    The handler is installed once per process; later calls only change the
    level. HTTP client chatter stays at WARNING.
    """
    global _handler
    root = logging.getLogger()
    root.setLevel(level)
    if _handler is not None:
        return

    for existing in list(root.handlers):
        root.removeHandler(existing)
    _handler = StderrHandler()
    _handler.setFormatter(ContextualFormatter(LOG_FORMAT))
    root.addHandler(_handler)
    for name in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, message: str, exc: BaseException) -> None:
    """Log a fatal condition at error level as ``message: exc``."""
    logger.error("%s: %s", message, exc)
