"""
Logging configuration with a colored, tag-based console handler.

Usage:
    from logging_config import get_logger
    logger = get_logger("github")
    logger.info("Assigned agent", extra={"owner": "octo", "repo": "demo"})
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime

# ANSI color codes for console output
COLORS = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}

# Module-specific colors for tags
TAG_COLORS = {
    "api": "\033[94m",  # Blue
    "github": "\033[95m",  # Magenta
    "tools": "\033[96m",  # Cyan
    "config": "\033[92m",  # Green
}


class ColoredConsoleFormatter(logging.Formatter):
    """Formatter that adds colors and the [tag] prefix."""

    def format(self, record: logging.LogRecord) -> str:
        level_color = COLORS.get(record.levelname, "")
        reset = COLORS["RESET"]

        tag = record.name
        tag_color = TAG_COLORS.get(tag, "\033[37m")

        timestamp = datetime.now().strftime("%H:%M:%S")
        level_str = f"{level_color}{record.levelname:8}{reset}"
        tag_str = f"{tag_color}[{tag}]{reset}"

        extra_parts = []
        if getattr(record, "owner", None) and getattr(record, "repo", None):
            extra_parts.append(f"repo={record.owner}/{record.repo}")
        if getattr(record, "issue_number", None):
            extra_parts.append(f"issue={record.issue_number}")
        if getattr(record, "tool", None):
            extra_parts.append(f"tool={record.tool}")

        extra_str = f" ({', '.join(extra_parts)})" if extra_parts else ""
        msg = f"{timestamp} {level_str} {tag_str} {record.getMessage()}{extra_str}"

        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


# Global state
_initialized = False
_console_handler: logging.Handler | None = None


def _get_console_level() -> int:
    """Get console log level from environment variable."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def init_logging(console_level: int | str | None = None) -> None:
    """Initialize the logging system with the console handler.

    Loggers are created at import time, before configuration is loaded, so
    a later call with an explicit level re-applies it to the existing
    handler.
    """
    global _initialized, _console_handler

    if isinstance(console_level, str):
        console_level = getattr(logging, console_level.upper(), logging.INFO)

    if _initialized:
        if console_level is not None and _console_handler is not None:
            _console_handler.setLevel(console_level)
        return

    if console_level is None:
        console_level = _get_console_level()

    _console_handler = logging.StreamHandler(sys.stdout)
    _console_handler.setLevel(console_level)
    _console_handler.setFormatter(ColoredConsoleFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(_console_handler)

    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    if not _initialized:
        init_logging()
    return logging.getLogger(name)
