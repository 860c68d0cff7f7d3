"""Structured logging configuration.

structlog renders every record, including those of ifcopenshell, mcp and
uvicorn coming through stdlib logging. Events of one model load carry its
generation via context variables.
"""
from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

_configured = False

# Chatty third-party loggers capped at WARNING
_QUIET_LOGGERS = ("asyncio", "httpx", "uvicorn.access", "mcp.server.lowlevel")


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _handlers(formatter: logging.Formatter, log_file: str | None) -> list[logging.Handler]:
    # MCP speaks over stdout, so records never go there
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(
    level: str = "INFO",
    log_format: str = "console",
    log_file: str | None = None,
) -> None:
    """Configure structured logging once per process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for machine-readable lines, "console" otherwise
        log_file: Optional file receiving the same records
    """
    global _configured
    if _configured:
        return

    processors = _shared_processors()
    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=processors,
    )

    root_logger = logging.getLogger()
    for handler in _handlers(formatter, log_file):
        root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


def setup_logging() -> None:
    """Configure logging from application settings."""
    from ifc_model_tree.shared.config import settings

    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
    )


@contextmanager
def load_context(generation: int) -> Iterator[None]:
    """Tag log events emitted inside the block with a load generation."""
    with structlog.contextvars.bound_contextvars(generation=generation):
        yield


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, configuring logging on first use.

    Args:
        name: Logger name (typically __name__)
    """
    if not _configured:
        setup_logging()

    return structlog.get_logger(name)
