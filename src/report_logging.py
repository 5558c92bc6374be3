#!/usr/bin/env python3
"""
Structured Logging Setup
Configures structlog on top of the standard logging module for the
report generator and its command line interface.
"""

import sys
import logging
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory

from report_config import ReportSettings


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None,
                      stream=None) -> None:
    """
    Configure structured logging with structlog.

    Args:
        level: Log level name, defaults to the LOG_LEVEL setting
        log_format: 'json' or 'text', defaults to the LOG_FORMAT setting
        stream: Output stream, defaults to stderr so reports can go to stdout
    """
    settings = ReportSettings()
    level = (level or settings.LOG_LEVEL).upper()
    log_format = (log_format or settings.LOG_FORMAT).lower()

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, level, logging.WARNING),
        force=True,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
