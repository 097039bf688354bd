"""structlog configuration and per-run IDs.

Every CLI invocation gets a short run ID, stored in a ContextVar and
stamped onto each event, so the download, transform and calculate
events of one run can be grouped. Events go to stderr; stdout is
reserved for reports and raw payloads.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import TextIO

import structlog

_run_id: ContextVar[str] = ContextVar("run_id", default="")

# httpx and httpcore log every request at INFO
_CHATTY_LIBRARIES = ("httpx", "httpcore")


def set_run_id(run_id: str | None = None) -> str:
    """Set the run ID for the current context, generating one if omitted."""
    value = uuid.uuid4().hex[:12] if run_id is None else run_id
    _run_id.set(value)
    return value


def get_run_id() -> str:
    return _run_id.get()


def _add_run_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    run_id = _run_id.get()
    if run_id:
        event_dict["run_id"] = run_id
    return event_dict


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(
    level: str = "INFO",
    log_format: str = "console",
    stream: TextIO | None = None,
) -> None:
    """Route structlog through stdlib logging with one stderr handler.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        log_format: "json" for one JSON object per line, "console" for
            key=value text.
        stream: Handler target; defaults to the current sys.stderr.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_run_id,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # Reconfigured per CLI run and per test
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    quiet = max(root.level, logging.WARNING)
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(quiet)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Named structlog logger."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
