"""
Logging configuration for lint runs.

This module provides structured (JSON lines) logging of lint events:
files analysed, diagnostics produced, files skipped and run summaries.
"""

import json
import logging
from logging.handlers import TimedRotatingFileHandler
from typing import Any

LINT_EVENTS_LOGGER = "amdguard.lint_events"


class LintEventFormatter(logging.Formatter):
    """Custom formatter for lint event logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log records with structured data."""
        # Base log entry
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, "event"):
            log_entry["event"] = record.event

        # Per-file fields
        for field in ["file", "language", "rule", "severity", "diagnostics"]:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        # Run summary fields
        for field in ["files_analyzed", "errors", "warnings", "parse_errors", "duration"]:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        # Error fields
        if hasattr(record, "error"):
            log_entry["error"] = record.error

        return json.dumps(log_entry)


def configure_lint_logging(
    log_file: str | None = None,
    log_level: str = "INFO",
    enable_console: bool = True,
) -> None:
    """
    Configure logging for lint events.

    Args:
        log_file: Path to log file for lint events (optional)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_console: Whether to also log to console
    """
    logger = logging.getLogger(LINT_EVENTS_LOGGER)
    logger.setLevel(getattr(logging, log_level.upper()))
    logger.propagate = False  # Don't propagate to root logger

    # Clear existing handlers
    logger.handlers.clear()

    formatter = LintEventFormatter()

    if log_file:
        # Daily rotation, one week kept
        file_handler = TimedRotatingFileHandler(
            log_file,
            when="D",
            interval=1,
            backupCount=7,
            encoding="utf-8",
            utc=False,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)


def get_lint_logger() -> logging.Logger:
    """Get the configured lint events logger."""
    return logging.getLogger(LINT_EVENTS_LOGGER)
