"""Parse the delimited import file into application records."""

from __future__ import annotations

import csv
from pathlib import Path

from pydantic import ValidationError

from storeapps.domain.models import ApplicationRecord
from storeapps.infrastructure.observability import get_logger

DEFAULT_DELIMITER = ";"
REQUIRED_COLUMNS = ("Name", "URL", "Publisher", "Description", "Icon")
VERSION_COLUMNS = ("MininumAndroidVersion", "MinimumAndroidVersion")

logger = get_logger(__name__)


class RecordImportError(Exception):
    """Raised when the import file cannot be read or parsed."""


def _check_header(fieldnames: list[str] | None, path: Path) -> None:
    if not fieldnames:
        raise RecordImportError(f"Import file {path} has no header row")
    present = set(fieldnames)
    missing = [col for col in REQUIRED_COLUMNS if col not in present]
    if not present.intersection(VERSION_COLUMNS):
        missing.append(VERSION_COLUMNS[0])
    if missing:
        raise RecordImportError(
            f"Import file {path} is missing columns: {', '.join(missing)}"
        )


def import_records(
    path: str | Path, delimiter: str = DEFAULT_DELIMITER
) -> list[ApplicationRecord]:
    """Read ``path`` and return one record per data row, in file order.

    Args:
        path: Delimited text file whose first row names the columns.
        delimiter: Single-character field separator.

    Raises:
        ValueError: If ``delimiter`` is not exactly one character.
        RecordImportError: If the file is missing, malformed, or a row
            lacks a required value.
    """
    if len(delimiter) != 1:
        raise ValueError(f"Delimiter must be a single character, got {delimiter!r}")

    source = Path(path)
    records: list[ApplicationRecord] = []
    try:
        # utf-8-sig strips the BOM written by Excel and PowerShell exports.
        with open(source, "r", encoding="utf-8-sig", newline="") as fp:
            reader = csv.DictReader(fp, delimiter=delimiter)
            _check_header(reader.fieldnames, source)
            for row in reader:
                try:
                    records.append(ApplicationRecord.model_validate(row))
                except ValidationError as exc:
                    problems = "; ".join(
                        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                        for err in exc.errors()
                    )
                    raise RecordImportError(
                        f"Invalid row at line {reader.line_num} of {source}: {problems}"
                    ) from exc
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise RecordImportError(f"Failed to read import file {source}: {exc}") from exc

    logger.info("Imported %d application record(s) from %s", len(records), source)
    return records


__all__ = ["DEFAULT_DELIMITER", "RecordImportError", "import_records"]
