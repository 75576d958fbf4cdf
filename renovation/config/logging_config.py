"""
Logging configuration.

structlog is layered over the standard library logging module so that
third-party loggers (SQLAlchemy, Streamlit) and our own event-style
logs end up in the same stream.
"""

import logging
import sys
from typing import Optional

import structlog

from renovation.config.settings import AppSettings, get_settings


_configured = False


def configure_logging(
    settings: Optional[AppSettings] = None,
    force: bool = False,
) -> None:
    """
    Configure stdlib logging and structlog once per process.

    Args:
        settings: App settings to read level and format from.
                  Defaults to the cached application settings.
        force: Reconfigure even if logging was already set up.
    """
    global _configured
    if _configured and not force:
        return

    settings = settings or get_settings().app
    level = getattr(logging, settings.log_level, logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=force,
    )

    if settings.log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to the given name."""
    return structlog.get_logger(name)
