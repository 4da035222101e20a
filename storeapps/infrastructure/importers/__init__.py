"""Input file importers."""

from .records import DEFAULT_DELIMITER, RecordImportError, import_records

__all__ = ["DEFAULT_DELIMITER", "RecordImportError", "import_records"]
