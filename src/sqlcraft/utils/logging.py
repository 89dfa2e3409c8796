"""Structured logging for sqlcraft using structlog.

This module provides the logging configuration shared by every sqlcraft
component:
- ISO-8601 timestamps
- JSON rendering for structured logs
- Automatic sanitization of sensitive fields
- Context binding support
- Dual output (stdout + optional rotating file)

Configuration is read from sqlcraft.config.settings:
- SQLCRAFT_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: INFO
- SQLCRAFT_LOG_TO_FILE: Enable file logging. Default: disabled
- SQLCRAFT_LOG_FILE_DIR: Directory for log files. Default: logs/

Usage:
    >>> from sqlcraft.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("database.query.executed", dialect="postgresql", bind_count=2)
"""

import logging
import re
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, MutableMapping

import structlog
from structlog.types import EventDict, Processor

from sqlcraft.config import get_settings

SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r".*token.*", re.IGNORECASE),
    re.compile(r".*api_key.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
    re.compile(r"^database_url$", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"

_HANDLER_MARKER = "_sqlcraft_handler"


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from a dictionary before logging.

    Redacts values for keys matching password, token, api_key, secret
    (case-insensitive, substring match) and database_url (exact match).

    Args:
        data: Dictionary that may contain sensitive data

    Returns:
        New dictionary with sensitive values replaced by [REDACTED]

    Example:
        >>> sanitize_for_logging({"password": "secret123", "user": "admin"})
        {'password': '[REDACTED]', 'user': 'admin'}
    """
    sanitized: Dict[str, Any] = {}
    for key, value in data.items():
        if any(pattern.match(key) for pattern in SENSITIVE_PATTERNS):
            sanitized[key] = REDACTED_VALUE
        elif isinstance(value, dict):
            sanitized[key] = sanitize_for_logging(value)
        else:
            sanitized[key] = value
    return sanitized


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor that redacts sensitive fields in event_dict."""
    return sanitize_for_logging(dict(event_dict))


def _get_log_level() -> int:
    """Resolve the configured log level to a logging constant."""
    level_name = get_settings().log_level
    return getattr(logging, level_name, logging.INFO)


def _get_log_file_path(log_dir: Path) -> Path:
    """Get the log file path with date-based naming."""
    log_dir.mkdir(parents=True, exist_ok=True)

    # Format: sqlcraft-YYYYMMDD.log
    date_str = datetime.now().strftime("%Y%m%d")
    return log_dir / f"sqlcraft-{date_str}.log"


def _configure_structlog() -> None:
    """Configure structlog with JSON rendering and sanitization.

    Handlers are tagged so that re-importing the module never stacks a
    second stdout or file handler on the root logger.
    """
    settings = get_settings()
    level = _get_log_level()
    logging.root.setLevel(level)

    installed = {
        getattr(handler, _HANDLER_MARKER)
        for handler in logging.root.handlers
        if hasattr(handler, _HANDLER_MARKER)
    }

    if "stdout" not in installed:
        stdout_handler = logging.StreamHandler()
        stdout_handler.setLevel(level)
        setattr(stdout_handler, _HANDLER_MARKER, "stdout")
        logging.root.addHandler(stdout_handler)

    if settings.log_to_file and "file" not in installed:
        log_file = _get_log_file_path(Path(settings.log_file_dir))
        file_handler = TimedRotatingFileHandler(
            filename=str(log_file),
            when="midnight",
            interval=1,
            backupCount=30,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        setattr(file_handler, _HANDLER_MARKER, "file")
        logging.root.addHandler(file_handler)

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog on module import
_configure_structlog()


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.warning("sql.insert.multirow_unsupported", dialect="sqlite", rows=3)
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Any:
    """Create a logger with bound context fields.

    Example:
        >>> logger = bind_context(dialect="postgresql", statement="select")
        >>> logger.debug("database.query.executed", bind_count=1)
    """
    return structlog.get_logger().bind(**kwargs)
