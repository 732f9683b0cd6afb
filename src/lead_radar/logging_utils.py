# logging_utils.py
"""Structured logging utilities for Lead Radar."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Standard LogRecord attributes that are not treated as extra fields
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName",
}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect the non-standard attributes attached to a log record."""
    extra_fields = {}
    for key, value in record.__dict__.items():
        if key not in _STANDARD_ATTRS and not key.startswith("_"):
            try:
                json.dumps(value)
                extra_fields[key] = value
            except (TypeError, ValueError):
                extra_fields[key] = str(value)
    return extra_fields


class StructuredFormatter(logging.Formatter):
    """Custom formatter that outputs JSON-structured log messages."""

    def __init__(
        self,
        service_name: str = "lead-radar",
        include_timestamp: bool = True,
        include_extra: bool = True,
    ):
        """Initialize the structured formatter.

        Args:
            service_name: Name of the service to include in logs
            include_timestamp: Whether to include timestamp in output
            include_extra: Whether to include extra fields from log record
        """
        super().__init__()
        self.service_name = service_name
        self.include_timestamp = include_timestamp
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a JSON string."""
        log_data: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "service": self.service_name,
        }

        if self.include_timestamp:
            log_data["timestamp"] = datetime.now(timezone.utc).isoformat()

        log_data["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            extra_fields = _extra_fields(record)
            if extra_fields:
                log_data["extra"] = extra_fields

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for development environments."""

    # ANSI color codes for different log levels
    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, show_extra: bool = True):
        """Initialize the human-readable formatter.

        Args:
            use_colors: Whether to use ANSI colors in output
            show_extra: Whether to append extra fields as key=value pairs
        """
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()
        self.show_extra = show_extra

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record in a human-readable format."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        message = record.getMessage()

        if self.use_colors:
            color = self.COLORS.get(level, "")
            level_str = f"{color}{level:8}{self.RESET}"
        else:
            level_str = f"{level:8}"

        formatted = f"[{timestamp}] {level_str} [{record.name}] {message}"

        if self.show_extra:
            extra_fields = _extra_fields(record)
            if extra_fields:
                pairs = " ".join(f"{k}={v}" for k, v in extra_fields.items())
                formatted += f" ({pairs})"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def setup_logging(
    level: Optional[str] = None,
    structured: Optional[bool] = None,
    service_name: str = "lead-radar",
) -> logging.Logger:
    """Set up logging configuration for Lead Radar.

    Configures the root logger and returns the ``lead_radar`` package logger.
    Records go to stderr so that CLI output on stdout stays machine-readable.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to LOG_LEVEL env var or INFO.
        structured: Whether to use structured JSON logging.
                   Defaults to True in production (APP_ENV != 'dev').
        service_name: Service name to include in structured logs.

    Returns:
        Logger instance for lead_radar

    Example:
        >>> logger = setup_logging(level="DEBUG", structured=False)
        >>> logger.info("Enriching lead", extra={"lead": "Acme Co"})
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO").upper()

    log_level = getattr(logging, level, logging.INFO)

    if structured is None:
        app_env = os.environ.get("APP_ENV", "prod")
        structured = app_env != "dev"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    if structured:
        formatter = StructuredFormatter(service_name=service_name)
    else:
        formatter = HumanReadableFormatter(use_colors=True)

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    _configure_third_party_loggers(log_level)

    logger = logging.getLogger("lead_radar")
    logger.debug(
        "Logging initialized",
        extra={
            "log_level": level,
            "structured": structured,
            "service": service_name,
        }
    )

    return logger


def _configure_third_party_loggers(log_level: int) -> None:
    """Configure third-party loggers to reduce noise.

    Args:
        log_level: The current log level being used
    """
    noisy_loggers = [
        "urllib3",
        "requests",
        "charset_normalizer",
    ]

    # Set these to WARNING unless we're in DEBUG mode
    third_party_level = logging.WARNING if log_level > logging.DEBUG else log_level

    for logger_name in noisy_loggers:
        logging.getLogger(logger_name).setLevel(third_party_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the lead_radar namespace.

    Args:
        name: The name of the logger (will be prefixed with 'lead_radar.')

    Returns:
        A logger instance
    """
    if not name.startswith("lead_radar"):
        name = f"lead_radar.{name}"
    return logging.getLogger(name)
