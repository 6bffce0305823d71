"""Structured logging for Patchpoint.

Console output is the default. Set ``PATCHPOINT_LOG_FORMAT=json`` for one
JSON object per line, and ``PATCHPOINT_LOG_LEVEL`` to change the threshold.

Usage:
    from patchpoint.logging import configure_logging, get_logger

    configure_logging()
    log = get_logger(__name__).bind(pr_number=42)
    log.info("review_started", files=12)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
from structlog.types import Processor

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]

LOG_FORMAT_ENV_VAR = "PATCHPOINT_LOG_FORMAT"
LOG_LEVEL_ENV_VAR = "PATCHPOINT_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

#: Chatty third-party loggers that are held at WARNING unless DEBUG is requested
_NOISY_LOGGERS = ("urllib3", "github", "aiohttp.access", "asyncio")


def _level_from_env() -> int:
    name = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, name, logging.INFO)


def _json_requested() -> bool:
    return os.environ.get(LOG_FORMAT_ENV_VAR, "").lower() == "json"


def _pre_chain() -> list[Processor]:
    """Processors applied to both structlog and stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(use_json: bool) -> Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stderr.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(*, force_json: bool = False, level: int | None = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Safe to call more than once; each call replaces the previous handlers.

    Args:
        force_json: Emit JSON regardless of ``PATCHPOINT_LOG_FORMAT``.
        level: Explicit level. Falls back to ``PATCHPOINT_LOG_LEVEL``.
    """
    use_json = force_json or _json_requested()
    log_level = level if level is not None else _level_from_env()

    exc_processor: Processor = (
        structlog.processors.dict_tracebacks
        if use_json
        else structlog.processors.format_exc_info
    )
    structlog.configure(
        processors=[
            *_pre_chain(),
            exc_processor,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(use_json),
            ],
            foreign_pre_chain=_pre_chain(),
        )
    )

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level)

    third_party_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    log: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return log


def bind_context(**context: Any) -> None:
    """Bind key/value pairs to every log line emitted in the current context.

    Uses contextvars, so bindings follow async tasks spawned afterwards.
    """
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    """Drop everything bound with :func:`bind_context`."""
    structlog.contextvars.clear_contextvars()
