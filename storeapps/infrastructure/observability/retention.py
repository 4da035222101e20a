"""Age-based pruning of old run log files."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable

from .logging import get_logger

DEFAULT_MAX_AGE = timedelta(days=30)

logger = get_logger(__name__)


@dataclass
class RetentionReport:
    """Files removed (and not removed) by a retention pass."""

    cutoff: datetime
    deleted: list[Path] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)


def prune_log_files(
    directory: str | Path,
    max_age: timedelta = DEFAULT_MAX_AGE,
    *,
    now: datetime | None = None,
    keep: Iterable[str | Path] = (),
) -> RetentionReport:
    """Delete files in ``directory`` last modified before ``now - max_age``.

    Only regular files directly inside ``directory`` are considered; files at
    exactly the cutoff and any path listed in ``keep`` are left alone. Errors
    are logged and collected in the report, never raised.
    """
    now = now or datetime.now()
    cutoff = now - max_age
    report = RetentionReport(cutoff=cutoff)
    root = Path(directory)
    kept = {Path(p).resolve() for p in keep}

    if not root.is_dir():
        logger.info("Log directory %s does not exist; nothing to prune", root)
        return report

    cutoff_ts = cutoff.timestamp()
    try:
        entries = sorted(root.iterdir())
    except OSError as exc:
        logger.error("Unable to list log directory %s: %s", root, exc)
        return report

    for entry in entries:
        try:
            if not entry.is_file() or entry.resolve() in kept:
                continue
            if entry.stat().st_mtime >= cutoff_ts:
                continue
            entry.unlink()
        except OSError as exc:
            logger.error("Failed to delete old log file %s: %s", entry, exc)
            report.failed.append((entry, str(exc)))
            continue
        logger.info("Deleted old log file %s", entry)
        report.deleted.append(entry)

    logger.info(
        "Log retention finished: %d deleted, %d failed (cutoff %s)",
        len(report.deleted),
        len(report.failed),
        cutoff.strftime("%d/%m/%Y %H:%M:%S"),
    )
    return report


__all__ = ["DEFAULT_MAX_AGE", "RetentionReport", "prune_log_files"]
