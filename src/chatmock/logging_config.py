# src/chatmock/logging_config.py
"""Logging setup for the chatmock server.

chatmock's own modules log through structlog; uvicorn logs through stdlib
``logging``. Both are sent to one stdout handler with one renderer, so the
``fault_injected`` or ``stream_aborted`` event of a request sits next to the
access line uvicorn writes for it. The server binds ``request_id`` and
``route`` with structlog.contextvars; they are merged into every event
emitted while the request is handled.

``cli.serve`` calls configure_logging() before starting uvicorn with
``log_config=None``, so uvicorn keeps this setup instead of installing its
own handlers.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter
from structlog.types import EventDict, Processor

from chatmock.config import LoggingConfig

# Taken over: handlers cleared, records propagated to the root handler.
UVICORN_LOGGERS: tuple[str, ...] = ("uvicorn", "uvicorn.error", "uvicorn.access")

# HTTP client libraries used by harnesses and tests. Kept at WARNING or above.
_QUIET_LOGGERS: tuple[str, ...] = ("asyncio", "httpx", "httpcore")

HANDLER_NAME = "chatmock"


def _drop_color_message(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Drop the ANSI-colored copy of the message uvicorn attaches as an extra."""
    event_dict.pop("color_message", None)
    return event_dict


def _shared_processors() -> list[Processor]:
    """Processors applied to structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _foreign_pre_chain() -> list[Processor]:
    """Processors for stdlib records (uvicorn): shared ones plus their extras."""
    return [
        *_shared_processors(),
        structlog.stdlib.ExtraAdder(),
        _drop_color_message,
    ]


def _render_processors(json_output: bool) -> list[Processor]:
    if json_output:
        return [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
    ]


def configure_logging(config: LoggingConfig) -> logging.Handler:
    """Route chatmock and uvicorn logging to one stdout handler.

    Args:
        config: Level and output format

    Returns:
        The installed handler (named ``chatmock``)
    """
    level = logging.getLevelNamesMapping()[config.level]
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        ProcessorFormatter(
            processors=_render_processors(config.json_output),
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True
        uvicorn_logger.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return handler


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a bound logger for a chatmock module (typically ``__name__``)."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
