"""Log setup shared by the scheduled worker and the CLI.

structlog events (``run_complete``, ``cluster_definition_updated``, ...)
and plain stdlib records from SQLAlchemy or the feed loader end up on one
handler with one renderer.  The worker emits JSON lines; ``log_json=False``
switches to the console renderer for local runs.
"""

import logging
import sys
from typing import TextIO

import structlog

# Chatty at INFO for a job that runs every few minutes
_NOISY_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def configure_logging(
    json_output: bool = True,
    log_level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Install the root handler and configure structlog.

    Args:
        json_output: JSON lines when ``True``, console output otherwise.
        log_level: Root level name, e.g. ``"INFO"``.
        stream: Where log lines go; defaults to stdout.  The CLI passes
            stderr so its JSON result on stdout stays parseable.
    """
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output),
            ],
        )
    )

    level = getattr(logging, log_level.upper())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
