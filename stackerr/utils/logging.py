"""
Structured logging utilities with JSON formatting and context injection.

This module provides structured logging capabilities with:
- JSON formatted log output for machine-readable logs
- StackError stacks and metadata fields rendered into the error section
- Context injection via LoggerAdapter
- Integration with Python's standard logging module
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from logging import LogRecord
from typing import Any, Dict, MutableMapping, Optional

from stackerr.stack_error import StackError


# Attributes every LogRecord carries; anything else came from ``extra``
_RESERVED_ATTRS = frozenset([
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName",
])


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON with standard fields:
    - timestamp: ISO 8601 formatted timestamp
    - level: Log level (INFO, WARNING, ERROR, etc.)
    - logger: Logger name
    - message: Log message
    - context: Additional context fields passed through ``extra``
    - error: Error details, including stacks and fields of a StackError
    """

    def format(self, record: LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted log string
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_data["context"] = extra_fields

        if record.exc_info and record.exc_info[1] is not None:
            log_data["error"] = self.format_error(record.exc_info)

        log_data["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName
        }

        return json.dumps(log_data, default=str)

    def format_error(self, exc_info) -> Dict[str, Any]:
        """
        Describe the logged exception.

        A StackError reports its wrapped error and its own stacks instead of
        the traceback of the point where it was re-raised.
        """
        exc_type, exc, tb = exc_info
        if isinstance(exc, StackError):
            return {
                "type": type(exc.err).__name__,
                "message": exc.error(),
                "stacks": exc.stacks().to_records(),
                "fields": dict(exc.fields()),
            }
        return {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc),
            "stack_trace": "".join(traceback.format_exception(exc_type, exc, tb)),
        }


class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that injects context fields into all log records.
    """

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        """
        Initialize context logger adapter.

        Args:
            logger: Base logger
            extra: Initial context fields
        """
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        """
        Process log message and inject context.

        Fields passed explicitly through ``extra`` win over adapter context.
        """
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextLoggerAdapter":
        """
        Create a new logger adapter with additional context.

        Args:
            **context: Additional context fields

        Returns:
            New logger adapter with merged context
        """
        new_extra = dict(self.extra)
        new_extra.update(context)
        return ContextLoggerAdapter(self.logger, new_extra)


def setup_logging(log_level: Optional[str] = None) -> None:
    """
    Configure structured logging for an application using the library.

    Sets up a JSON formatted console handler on the root logger. The library
    itself never calls this.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the configured ``log_level``.
    """
    if log_level is None:
        from stackerr.config import settings
        log_level = settings.log_level

    formatter = JSONFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)


def get_logger(name: str, **context: Any) -> ContextLoggerAdapter:
    """
    Get a context-aware logger for a module.

    Args:
        name: Logger name (typically __name__)
        **context: Initial context fields

    Returns:
        Context logger adapter
    """
    base_logger = logging.getLogger(name)
    return ContextLoggerAdapter(base_logger, context)


def log_error_with_context(
    logger: logging.LoggerAdapter,
    message: str,
    error: BaseException,
    **context: Any
) -> None:
    """
    Log error with its stacks and context.

    Metadata fields of a StackError are added to the log context; explicit
    context fields win on conflicting keys.

    Args:
        logger: Logger to use
        message: Error message
        error: Exception object
        **context: Additional context fields
    """
    extra: Dict[str, Any] = {}
    if isinstance(error, StackError):
        extra.update(error.fields())
    extra.update(context)

    # LogRecord refuses extra keys that shadow its own attributes
    extra = {key: value for key, value in extra.items() if key not in _RESERVED_ATTRS}

    logger.error(
        message,
        extra=extra,
        exc_info=(type(error), error, error.__traceback__)
    )
