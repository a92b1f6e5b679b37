"""Logging helpers for kiosksync.

Every module obtains its logger through :func:`get_logger`. Sync passes wrap
their work in :func:`log_context` so that lines emitted from the fetcher, the
decoder and the store all carry the auction they belong to.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_log_context: ContextVar[dict[str, Any]] = ContextVar("kiosksync_log_context", default={})


class ContextualFormatter(logging.Formatter):
    """Formatter that appends the active context fields to each line."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        ctx = getattr(record, "kiosk_context", None) or _log_context.get()
        if not ctx:
            return line
        fields = " ".join(f"{key}={value}" for key, value in ctx.items())
        return f"{line} [{fields}]"


class _ContextFilter(logging.Filter):
    """Capture the context on the emitting thread.

    Handlers may format on another thread, so the fields are copied onto the
    record while the caller's context is still current.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "kiosk_context"):
            record.kiosk_context = dict(_log_context.get())
        return True


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Add ``fields`` to every log line emitted inside the block.

    Usage::

        with log_context(auction_id="los-angeles-2024", page=3):
            logger.info("Fetching page")

    Nested blocks merge their fields; the outer context is restored on exit.
    """
    token = _log_context.set({**_log_context.get(), **fields})
    try:
        yield
    finally:
        _log_context.reset(token)


def current_log_context() -> dict[str, Any]:
    return dict(_log_context.get())


_configured = False


def configure_logging(
    level: int = logging.INFO,
    third_party_level: int = logging.WARNING,
) -> None:
    """Install the kiosksync handler on the root logger.

    Call once from an entry point (the CLI does this). Repeated calls are
    ignored.

    Args:
        level: Level for application loggers.
        third_party_level: Level for chatty libraries such as ``urllib3``.
    """
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ContextualFormatter(LOG_FORMAT))
    handler.addFilter(_ContextFilter())
    root.addHandler(handler)

    for name in ("urllib3", "requests", "asyncio"):
        logging.getLogger(name).setLevel(third_party_level)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)


def log_exception(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """Log ``exc`` with its traceback and extra context fields."""
    with log_context(**context):
        logger.exception("%s: %s", message, exc)


__all__ = [
    "ContextualFormatter",
    "LOG_FORMAT",
    "configure_logging",
    "current_log_context",
    "get_logger",
    "log_context",
    "log_exception",
]
