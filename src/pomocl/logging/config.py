"""
Logging configuration for pomocl.

pomocl is a command-line tool whose stdout belongs to the status line, so
log records go to a debug log file next to the stored session instead of
the terminal. All modules obtain their logger through ``get_logger``.
"""
import logging
from pathlib import Path
from typing import Optional

import structlog
from structlog.types import FilteringBoundLogger

DEBUG_LOG_NAME = "pomocl-debug.log"


def configure_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_json: bool = False,
) -> None:
    """
    Configure structlog for the whole application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: File the records are appended to; when omitted records
            are discarded
        format_json: If True, write JSON lines; otherwise key=value text
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.addHandler(handler)
    root.setLevel(log_level)

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

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.processors.KeyValueRenderer(sort_keys=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfigured once the config file is read, so loggers must not
        # keep the processors they were first used with.
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a structlog logger for ``name`` (typically ``__name__``)."""
    return structlog.get_logger(name)
