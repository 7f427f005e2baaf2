"""
Utility modules for stackerr.
"""

from stackerr.utils.logging import (
    ContextLoggerAdapter,
    JSONFormatter,
    get_logger,
    setup_logging,
    log_error_with_context,
)

__all__ = [
    "ContextLoggerAdapter",
    "JSONFormatter",
    "get_logger",
    "setup_logging",
    "log_error_with_context",
]
