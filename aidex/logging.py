"""Structured logging set-up for the aidex CLI."""

import logging
import sys

import structlog

_LEVELS = {0: logging.WARNING, 1: logging.INFO, 2: logging.DEBUG}


def level_for(verbose: int) -> int:
    """Map a ``--verbose`` count onto a stdlib log level (clamped to 0..2)."""
    return _LEVELS[max(0, min(verbose, 2))]


def configure_logging(verbose: int = 0) -> None:
    """
    Configure structlog for one CLI run.

    Logs always go to stderr so that table and JSON output on stdout stay
    clean. A TTY gets the console renderer, anything else gets JSON lines.

    Args:
        verbose: Verbosity count from the command line (0, 1 or 2)
    """
    log_level = level_for(verbose)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if sys.stderr.isatty():
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, e.g. ``get_logger("aidex.search")``."""
    return structlog.get_logger(name)
