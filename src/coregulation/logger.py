"""Structured logging configuration using *structlog*."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator

import structlog

from coregulation.config import get_settings


def setup_logging(level: str | None = None, *, json: bool | None = None) -> None:
    """Configure *structlog* processors for the core.

    The embedding application calls this once at startup; until then
    structlog's defaults apply and every module logger still works.

    Parameters
    ----------
    level
        Minimum level name; defaults to ``Settings.log_level``.
    json
        Force JSON (``True``) or console (``False``) rendering.  By default
        the console renderer is used only when stderr is a TTY.
    """
    level = (level or get_settings().log_level).upper()
    if json is None:
        json = not sys.stderr.isatty()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def session_context(session_id: str, **context: object) -> Iterator[None]:
    """Tag every log line emitted inside the block (including from worker
    threads started with :func:`asyncio.to_thread`) with the session id."""
    with structlog.contextvars.bound_contextvars(session_id=session_id, **context):
        yield
