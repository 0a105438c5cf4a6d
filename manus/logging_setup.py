"""structlog setup for the manus command line.

Events from `structlog.get_logger(__name__)` are routed through the stdlib
"manus" logger, so third-party stdlib records share its handler and level.
Everything goes to stderr; stdout is kept for rendered documents.
"""
import logging
import sys
from typing import List

import structlog
from structlog.types import Processor

APP_LOGGER_NAME = "manus"
LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def _event_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]


def _select_renderer(force_json_logs: bool) -> Processor:
    # JSON lines for machines; colours only when a person is watching stderr.
    if force_json_logs:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _stderr_handler(renderer: Processor) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[structlog.stdlib.add_log_level],
        )
    )
    return handler


def configure_logging(log_level_str: str = "warning", force_json_logs: bool = False) -> None:
    """Install the manus handler at `log_level_str` (unknown names fall back to warning)."""
    level_name = log_level_str.lower() if log_level_str.lower() in LOG_LEVELS else "warning"

    structlog.configure(
        processors=_event_processors(),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.handlers.clear()
    app_logger.addHandler(_stderr_handler(_select_renderer(force_json_logs)))
    app_logger.setLevel(level_name.upper())

    structlog.get_logger(__name__).info("logging_configured", level=level_name, json=force_json_logs)
