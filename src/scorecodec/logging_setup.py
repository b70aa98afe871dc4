"""structlog configuration for the command line entry point.

The library itself only calls `structlog.stdlib.get_logger()`; applications
embedding the codec configure structlog however they like.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def _processors(json_logs: bool) -> list[Any]:
    common: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_logs:
        return common + [structlog.processors.JSONRenderer()]
    return common + [structlog.dev.ConsoleRenderer(colors=False)]


def configure_logging(level: str = "WARNING", *, json_logs: bool = False) -> None:
    """Send codec log events through stdlib logging to stderr.

    stdout stays reserved for command output.
    """

    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    structlog.configure(
        processors=_processors(json_logs),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # Loggers are module globals; caching would pin the first configuration.
        cache_logger_on_first_use=False,
    )
