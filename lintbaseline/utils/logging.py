"""
Centralized structured logging for lintbaseline.

Provides:
- Rich console output with colors and formatting
- Optional JSON format for machine parsing
- File logging with rotation
- Component-aware logging with context
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

# Diagnostics go to stderr so reports on stdout stay clean
console = Console(stderr=True)

LOGGER_NAME = "lintbaseline"
DEFAULT_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for machine parsing."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a JSON string."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "context"):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    json_format: bool = False,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path for file logging
        json_format: Use JSON format for log output
        max_file_size_mb: Maximum log file size before rotation
        backup_count: Number of backup files to keep

    Returns:
        Configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()

    if json_format:
        console_handler: logging.Handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler = RichHandler(
            console=console,
            show_time=False,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        console_handler.setFormatter(logging.Formatter("%(message)s"))

    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )

        if json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))

        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


class ComponentLogger:
    """
    Logger bound to one lintbaseline component.

    Keyword context is appended to the message as ``key=value`` pairs and
    attached to the record as ``context`` for the JSON formatter.
    """

    def __init__(self, component: str):
        self.component = component
        self._logger = logging.getLogger(f"{LOGGER_NAME}.{component}")

    def _log(self, level: int, msg: str, context: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if context:
            msg = f"{msg} | " + " | ".join(f"{k}={v}" for k, v in context.items())
        self._logger.log(level, msg, extra={"context": {"component": self.component, **context}})

    def debug(self, msg: str, **context: Any) -> None:
        self._log(logging.DEBUG, msg, context)

    def info(self, msg: str, **context: Any) -> None:
        self._log(logging.INFO, msg, context)

    def warning(self, msg: str, **context: Any) -> None:
        self._log(logging.WARNING, msg, context)


def get_logger(component: str) -> ComponentLogger:
    """Return the logger of a component, e.g. ``get_logger("workflow")``."""
    return ComponentLogger(component)
