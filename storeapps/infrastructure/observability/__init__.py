"""Observability and logging facades."""

from .logging import (
    LogConfig,
    RunLogFileHandler,
    configure_logging,
    get_logger,
    log_context,
    log_exception,
)
from .retention import DEFAULT_MAX_AGE, RetentionReport, prune_log_files

__all__ = [
    # Logging
    "LogConfig",
    "RunLogFileHandler",
    "configure_logging",
    "get_logger",
    "log_context",
    "log_exception",
    # Retention
    "DEFAULT_MAX_AGE",
    "RetentionReport",
    "prune_log_files",
]
