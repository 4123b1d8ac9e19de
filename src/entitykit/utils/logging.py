"""
Logging Utilities

structlog-based loggers for entitykit components.
"""

import logging
import sys
from typing import Any, Optional

import structlog


def _ensure_configured() -> None:
    if not structlog.is_configured():
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.UnicodeDecoder(),
                structlog.dev.ConsoleRenderer(),
            ],
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )


def get_logger(name: str) -> Any:
    """
    Get a logger for the specified name

    Args:
        name: Logger name (usually the module name)

    Returns:
        Bound structlog logger
    """
    _ensure_configured()
    return structlog.get_logger(name)


def configure_logging(level: str = "INFO", format_string: Optional[str] = None) -> None:
    """
    Configure logging for entitykit components

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for the stdlib handler
    """
    _ensure_configured()
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string or "%(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("entitykit").setLevel(getattr(logging, level.upper()))
