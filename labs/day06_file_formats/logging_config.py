"""
structlog setup for the lab runner.

Events go to stderr so they never interleave with the rich tables on stdout.
Modules log through structlog.get_logger() at import time; nothing is cached,
so calling setup_logging later still takes effect.
"""

import logging
import sys

import structlog

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def resolve_level(level: str | None) -> int:
    """Numeric level for a level name; unknown or empty names mean INFO"""
    name = (level or "INFO").upper()
    return getattr(logging, name) if name in LEVELS else logging.INFO


def setup_logging(level: str | None = "INFO", colors: bool | None = None) -> int:
    """
    Route structlog events to stderr, dropping those below level.

    Returns the numeric level that was applied.
    """
    numeric_level = resolve_level(level)
    if colors is None:
        colors = sys.stderr.isatty()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
    return numeric_level
