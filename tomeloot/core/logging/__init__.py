"""
Logging package for TomeLoot.

Re-exports the public logging API so callers can write
`from tomeloot.core.logging import get_logger, LogContext`.
"""

from tomeloot.core.logging.logger import (
    ColoredFormatter,
    ContextFilter,
    JSONFormatter,
    LogContext,
    clear_log_context,
    get_log_context,
    get_logger,
    set_log_context,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "ColoredFormatter",
    "ContextFilter",
    "JSONFormatter",
    "LogContext",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "set_log_context",
    "setup_logging",
    "shutdown_logging",
]
