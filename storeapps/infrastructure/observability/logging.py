"""Logging utilities for storeapps.

This module provides centralised logging configuration and helpers for
contextual logging throughout the project. Every run writes to its own log
file, named after the configured base path with the run timestamp inserted
before the extension, and echoes each entry to the console.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator, TextIO

LOGGER_NAME = "storeapps"
LOG_LINE_FORMAT = "%(asctime)s|%(message)s"
LOG_DATE_FORMAT = "%d/%m/%Y %H:%M:%S"
RUN_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


# ---------------------------------------------------------------------------
# Context variables for structured logging
# ---------------------------------------------------------------------------

_log_context: ContextVar[dict[str, Any]] = ContextVar(
    "log_context", default={})


class ContextualFormatter(logging.Formatter):
    """Formatter that appends context fields to log messages."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        # One entry per line, whatever the message or traceback contains.
        message = " ".join(part.strip() for part in message.splitlines() if part.strip())
        ctx = _log_context.get()
        if ctx:
            ctx_str = " ".join(f"{k}={v}" for k, v in ctx.items())
            message = f"{message} [{ctx_str}]"
        return message


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Temporarily add context fields to all log messages.

    Usage::

        with log_context(row=3, app="Contoso Mail"):
            logger.info("Creating application")  # message includes context

    Fields are merged with any existing context and restored on exit.
    """
    current = _log_context.get()
    merged = {**current, **fields}
    token = _log_context.set(merged)
    try:
        yield
    finally:
        _log_context.reset(token)


# ---------------------------------------------------------------------------
# Per-run log file
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LogConfig:
    """Base log path plus the timestamp that makes it unique for one run."""

    base_path: Path
    run_timestamp: datetime

    @property
    def path(self) -> Path:
        token = self.run_timestamp.strftime(RUN_TIMESTAMP_FORMAT)
        base = Path(self.base_path)
        if base.suffix:
            return base.with_name(f"{base.stem}_{token}{base.suffix}")
        return base.with_name(f"{base.name}_{token}")

    @property
    def directory(self) -> Path:
        return self.path.parent


class RunLogFileHandler(logging.Handler):
    """Append formatted records to a file, retrying transient write failures.

    The file is opened for every record so that a lock held by another
    process only affects the entry being written. A failed write is retried
    after ``retry_delay`` seconds up to ``max_attempts`` attempts in total;
    after that the line goes to ``fallback`` (stderr by default).
    """

    def __init__(
        self,
        path: str | Path,
        *,
        max_attempts: int = 2,
        retry_delay: float = 0.1,
        fallback: TextIO | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__()
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.path = Path(path)
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.fallback = fallback
        self._sleep = sleep

    def _write_line(self, line: str) -> None:
        with open(self.path, "a", encoding="utf-8") as fp:
            fp.write(line + "\n")

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
        except Exception:
            self.handleError(record)
            return

        last_error: OSError | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                self._write_line(line)
                return
            except OSError as exc:
                last_error = exc
                if attempt < self.max_attempts:
                    self._sleep(self.retry_delay)

        stream = self.fallback or sys.stderr
        try:
            stream.write(f"{line} (log write to {self.path} failed: {last_error})\n")
            stream.flush()
        except Exception:
            self.handleError(record)


# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------


def configure_logging(
    log_config: LogConfig,
    *,
    console: TextIO | None = None,
    level: int = logging.INFO,
    third_party_level: int = logging.WARNING,
) -> Path:
    """Configure logging for one import run.

    Call this once at startup, before any other step, so that module loading
    failures end up in the run's log file.

    Args:
        log_config: Base path and run timestamp for the log file.
        console: Stream that receives the echoed messages (default stdout).
        level: Log level for application loggers (default INFO).
        third_party_level: Log level for third-party libraries (default WARNING).

    Returns:
        The resolved path of the run's log file.
    """
    log_path = log_config.path
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.touch(exist_ok=True)
    except OSError as exc:
        # Entries still go to the console, and each file write falls back to stderr.
        sys.stderr.write(f"Cannot create log file {log_path}: {exc}\n")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Remove any existing handlers to avoid duplicates across runs
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    file_handler = RunLogFileHandler(log_path)
    file_handler.setFormatter(
        ContextualFormatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT)
    )
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(console or sys.stdout)
    console_handler.setFormatter(ContextualFormatter("%(message)s"))
    logger.addHandler(console_handler)

    # Quieten noisy third-party loggers
    for name in ("urllib3", "requests"):
        logging.getLogger(name).setLevel(third_party_level)

    return log_path


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given name.

    Loggers outside the ``storeapps`` namespace do not reach the run log file,
    so callers should pass ``__name__`` from a module inside the package.
    """
    return logging.getLogger(name)


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------


def log_exception(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """Log an error with context fields.

    Args:
        logger: Logger instance.
        message: Human-readable message describing the error.
        exc: The exception that was raised.
        **context: Additional context fields to include.
    """
    with log_context(**context):
        logger.error(f"{message}: {exc}")
