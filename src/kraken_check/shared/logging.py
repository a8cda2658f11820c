"""Logging for kraken-check.

structlog renders every event on top of stdlib logging. A run binds its id
and target API url once; each scenario event carries them, which keeps
concurrent runs apart in a shared CI log.
"""

import logging
import sys
import uuid
from pathlib import Path

import structlog


def configure_logging(
    level: str = "warning",
    log_file: str | Path | None = None,
    json_output: bool = False,
) -> None:
    """Route structlog events to stderr (or a file) at the given level.

    Args:
        level: Log level name (debug, info, warning, error)
        log_file: Write to this file instead of stderr
        json_output: One JSON object per line instead of console output
    """
    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(str(log_file))
    else:
        handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        handlers=[handler],
        format="%(message)s",
        force=True,
    )

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=log_file is None and sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_run_context(api_url: str, run_id: str | None = None) -> str:
    """Attach run-level fields to every event logged from here on.

    Returns:
        The run id (generated when not given)
    """
    run_id = run_id or uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(run_id=run_id, api_url=api_url)
    return run_id


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
