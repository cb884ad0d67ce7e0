"""extcompat — Structured logging configuration.

Uses structlog for structured, levelled logging.  All log entries include:
    - timestamp (ISO-8601)
    - level
    - logger (Python logger name)
    - module_id / symbol (bound while a compatibility check is running)

Diagnostics produced by the verifier and the guard are routed through the
same logger by the default diagnostic sink, so a host that already
configures structlog gets them without extra wiring.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

# Context variables: automatically injected into log records when set.
_ctx_module_id: ContextVar[str | None] = ContextVar("module_id", default=None)
_ctx_symbol: ContextVar[str | None] = ContextVar("symbol", default=None)


@contextmanager
def bind_check_context(
    module_id: str | None = None,
    symbol: str | None = None,
) -> Iterator[None]:
    """Tag every record emitted inside the block with *module_id* / *symbol*."""
    module_token = _ctx_module_id.set(module_id)
    symbol_token = _ctx_symbol.set(symbol)
    try:
        yield
    finally:
        _ctx_symbol.reset(symbol_token)
        _ctx_module_id.reset(module_token)


# ---------------------------------------------------------------------------
# Custom processors
# ---------------------------------------------------------------------------


def _inject_context_vars(
    _logger: WrappedLogger, _method: str, event_dict: EventDict
) -> EventDict:
    """Add ContextVar values to every log record."""
    if (module_id := _ctx_module_id.get()) is not None:
        event_dict.setdefault("module_id", module_id)
    if (symbol := _ctx_symbol.get()) is not None:
        event_dict.setdefault("symbol", symbol)
    return event_dict


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def configure_logging(
    level: str = "info",
    format: str = "console",
    log_file: str | None = None,
) -> None:
    """Configure structlog and stdlib logging.

    Hosts that embed extcompat usually own logging themselves and never call
    this; the CLI calls it once at startup.

    Args:
        level:    One of debug, info, warning, error, critical.
        format:   ``"console"`` for human-readable output, ``"json"`` for
                  machine-readable structured logs.
        log_file: Optional path to write logs to in addition to stderr.
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _inject_context_vars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handlers: list[logging.Handler] = []

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.handlers = handlers
    root_logger.setLevel(level.upper())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger for *name*.

    Usage::

        log = get_logger(__name__)
        log.debug("symbol_resolved", owner="acme.api.Widget", method="spin")
    """
    return structlog.get_logger(name)
