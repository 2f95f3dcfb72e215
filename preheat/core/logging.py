"""Structured logging setup for preheat.

All modules log through structlog with snake_case event names and keyword
context. Standard library loggers (httpx, httpcore) are routed through the
same processor chain so every line looks alike.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor


NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(
    json_logs: bool = False,
    log_level_name: str = "INFO",
    log_file: str | None = None,
) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        json_logs: Render console output as JSON instead of colored text
        log_level_name: Logging level name (DEBUG, INFO, WARNING, ...)
        log_file: Optional path of a file that receives JSON log lines
    """
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    shared_processors = _shared_processors()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    console_renderer: Processor
    if json_logs:
        console_renderer = structlog.processors.JSONRenderer()
    else:
        console_renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *([structlog.processors.format_exc_info] if json_logs else []),
                console_renderer,
            ],
        )
    )
    handlers: list[logging.Handler] = [handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=shared_processors,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.JSONRenderer(),
                ],
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(
            max(log_level, logging.WARNING)
        )


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
