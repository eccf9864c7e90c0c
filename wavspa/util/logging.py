"""Structured logging configuration for wavspa.

Provides a centralized logging setup with:
- Console handler (stderr) with configurable level
- Optional file handler (JSON lines for machine parsing)
- Environment-based configuration

Usage:
    from wavspa.util.logging import get_logger, configure_logging

    configure_logging(level="DEBUG", json_file="render.log")
    logger = get_logger(__name__)
    logger.info("Rendering", extra={"block_count": 120})
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional


_configured = False
_root_logger_name = "wavspa"

# record attributes copied into JSON lines when passed via extra=
CONTEXT_KEYS = ("input", "output", "block_count", "error_type", "anomalies")


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON for machine parsing."""

    def format(self, record: logging.LogRecord) -> str:
        output: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_KEYS:
            if hasattr(record, key):
                output[key] = getattr(record, key)
        if record.exc_info:
            output["traceback"] = "".join(traceback.format_exception(*record.exc_info))
        return json.dumps(output, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console format with optional color.

    Tracebacks are only appended when ``show_traceback`` is set, so a failed
    render prints one line unless debug output was requested.
    """

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True, show_traceback: bool = False):
        super().__init__()
        self.use_color = use_color and sys.stderr.isatty()
        self.show_traceback = show_traceback

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        if self.use_color:
            color = self.LEVEL_COLORS.get(level, "")
            level_str = f"{color}{level:8}{self.RESET}"
        else:
            level_str = f"{level:8}"
        name = record.name.replace("wavspa.", "")
        base = f"{level_str} [{name}] {record.getMessage()}"
        if record.exc_info and self.show_traceback:
            base += "\n" + "".join(traceback.format_exception(*record.exc_info))
        return base


def configure_logging(
    *,
    level: Optional[str] = None,
    json_file: Optional[str] = None,
    use_color: bool = True,
    verbose: bool = False,
) -> None:
    """Configure the wavspa logging subsystem.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to WARNING,
               or DEBUG if WAVSPA_DEBUG=1 is set.
        json_file: Optional path to write JSON-formatted logs.
        use_color: Whether to colorize console output (auto-disabled if not a TTY).
        verbose: Shorthand for level="DEBUG"; wins over ``level``.

    Calling it again replaces the handlers installed by the previous call.
    """
    global _configured

    if verbose:
        level = "DEBUG"
    elif level is None:
        if os.environ.get("WAVSPA_DEBUG", "").strip() in ("1", "true", "yes"):
            level = "DEBUG"
        else:
            level = os.environ.get("WAVSPA_LOG_LEVEL", "WARNING").upper()

    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(_root_logger_name)
    logger.setLevel(numeric_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(ConsoleFormatter(use_color=use_color, show_traceback=numeric_level <= logging.DEBUG))
    logger.addHandler(console_handler)

    if json_file:
        try:
            file_handler = logging.FileHandler(json_file, mode="a", encoding="utf-8")
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)
        except OSError as exc:
            logger.warning("Failed to open JSON log file %s: %s", json_file, exc)

    logger.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the wavspa namespace.

    If configure_logging() has not been called, a default configuration
    is applied automatically.
    """
    global _configured
    if not _configured:
        configure_logging()

    if not name.startswith(_root_logger_name):
        if name == "__main__":
            name = f"{_root_logger_name}.main"
        else:
            name = f"{_root_logger_name}.{name}"

    return logging.getLogger(name)


def log_exception(
    logger: logging.Logger,
    message: str,
    *,
    error_type: Optional[str] = None,
    **extra: Any,
) -> None:
    """Log the exception currently being handled with structured context.

    Args:
        logger: The logger to use.
        message: Human-readable error description.
        error_type: Category of error (e.g., "config", "engine").
        **extra: Additional context fields.
    """
    extra_dict = dict(extra)
    if error_type:
        extra_dict["error_type"] = error_type
    logger.exception(message, extra=extra_dict)
