"""Structured logging for cake day runs.

structlog renders both structlog events (the bootstrap) and plain
``logging`` records (engine and pipeline modules, which log with
``extra=``).  Every entry carries the ``run_id`` of the invocation that
produced it, plus whatever run context was bound by :func:`start_run`.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog

from cake_days.core.enums import LogFormat
from cake_days.core.ids import new_id

_HANDLER_NAME = "cake_days"

_run_id: ContextVar[str] = ContextVar("run_id", default="")


def get_run_id() -> str:
    """Current run ID, created on first use."""
    rid = _run_id.get()
    if not rid:
        rid = new_id()
        _run_id.set(rid)
    return rid


def start_run(**context: Any) -> str:
    """Begin a new run: fresh run ID, previous run context dropped.

    Keyword arguments (input file, year, ...) are attached to every entry
    logged until the next call.
    """
    structlog.contextvars.clear_contextvars()
    rid = new_id()
    _run_id.set(rid)
    if context:
        structlog.contextvars.bind_contextvars(**context)
    return rid


def _add_run_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor: add run_id to every log entry."""
    event_dict["run_id"] = get_run_id()
    return event_dict


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        _add_run_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def build_formatter(format: str = LogFormat.CONSOLE.value) -> structlog.stdlib.ProcessorFormatter:
    """Formatter rendering stdlib records and structlog events alike.

    ``extra=`` fields on stdlib records become top-level keys.
    """
    if format == LogFormat.JSON.value:
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[*_shared_processors(), structlog.stdlib.ExtraAdder()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def setup_logging(
    level: str = "WARNING",
    format: str = LogFormat.CONSOLE.value,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for machine-readable output, "console" for humans.

    A stderr handler is installed only when the root logger has none, so
    handlers set up by an embedding application (or pytest) are kept.
    Calling this again swaps the renderer on the installed handler.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        root.addHandler(handler)
    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            handler.setFormatter(build_formatter(format))
    root.setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)
