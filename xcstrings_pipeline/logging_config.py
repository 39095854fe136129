"""Structured logging for pipeline runs.

structlog renders both its own events and stdlib records from libraries
through one stdout handler: JSON lines in production, so a CI job can parse
per-key progress, and a coloured console view otherwise. The CLI binds the
running stage into the context, so every line says which stage emitted it.
"""

import logging
import sys
from typing import Optional

import structlog

from xcstrings_pipeline.config import Settings, get_settings

# The OpenAI client logs every HTTP request at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "openai")


def _pre_chain(json_output: bool) -> list[structlog.types.Processor]:
    """Processors shared by structlog events and foreign stdlib records."""
    timestamper = (
        structlog.processors.TimeStamper(fmt="iso", utc=True)
        if json_output
        else structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False)
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        timestamper,
        structlog.processors.format_exc_info,
    ]


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _stdout_handler(json_output: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(json_output),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output),
            ],
        )
    )
    return handler


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Route structlog and stdlib logging through a single stdout handler."""
    settings = settings or get_settings()
    json_output = settings.app_env == "production"

    structlog.configure(
        processors=[
            *_pre_chain(json_output),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.handlers[:] = [_stdout_handler(json_output)]
    root_logger.setLevel(logging.DEBUG if settings.app_debug else logging.INFO)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
