"""Structured logging setup for the relkit command line.

Library modules only ask structlog for loggers; the CLI configures the
rendering once, before any command runs.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Configure structlog for a CLI run.

    Log lines go to stderr so command output on stdout stays parseable.

    Args:
        verbose: Log at DEBUG instead of WARNING.
        json_logs: Render JSON lines instead of the console format.

    Example:
        >>> configure_logging(verbose=True)
    """
    level = logging.DEBUG if verbose else logging.WARNING

    processors: list[Any] = [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)
