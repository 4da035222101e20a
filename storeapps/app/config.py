"""Configuration utilities for storeapps.

Settings come from three places, in increasing precedence: built-in
defaults, an optional JSON configuration file and command-line options.
A configuration file looks like::

    {
        "log_path": "/var/log/storeapps/Add-AndroidApps.txt",
        "csv_delimiter": ";",
        "max_age_log_files": 30,
        "tolerant": false,
        "connection": {"tenant_id": "...", "client_id": "..."}
    }
"""

from __future__ import annotations

import json
import tempfile
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Mapping

from storeapps.services.policy import StagePolicies

DEFAULT_LOG_PATH = Path(tempfile.gettempdir()) / "CustomScripts" / "Add-AndroidApps.txt"
DEFAULT_DELIMITER = ";"
DEFAULT_MAX_AGE_DAYS = 30


class ConfigError(Exception):
    """Raised when a configuration file is unreadable or invalid."""


def load_config(path: str | Path) -> Dict[str, Any]:
    """Load configuration from a JSON file.

    Args:
        path: Path to the JSON configuration file.

    Returns:
        A dictionary of configuration values.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Cannot read configuration {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration {path} must contain a JSON object")
    return data


@dataclass(frozen=True)
class ImportSettings:
    """Everything one import run needs."""

    csv_location: Path
    module_path: Path
    log_path: Path = DEFAULT_LOG_PATH
    csv_delimiter: str = DEFAULT_DELIMITER
    max_age_log_files: timedelta = timedelta(days=DEFAULT_MAX_AGE_DAYS)
    connection: Mapping[str, Any] = field(default_factory=dict)
    policies: StagePolicies = field(default_factory=StagePolicies)
    dry_run: bool = False

    def __post_init__(self) -> None:
        if len(self.csv_delimiter) != 1:
            raise ValueError(
                f"csv_delimiter must be a single character, got {self.csv_delimiter!r}"
            )
        if self.max_age_log_files < timedelta(0):
            raise ValueError("max_age_log_files must not be negative")


def build_settings(
    *,
    csv_location: str | Path,
    module_path: str | Path,
    config_path: str | Path | None = None,
    log_path: str | Path | None = None,
    csv_delimiter: str | None = None,
    max_age_days: int | None = None,
    connection: Mapping[str, Any] | None = None,
    tolerant: bool | None = None,
    dry_run: bool = False,
) -> ImportSettings:
    """Merge CLI values over the configuration file over the defaults.

    ``None`` means "not given on the command line". Connection entries are
    merged key by key, ignoring empty CLI values.
    """
    cfg = load_config(config_path) if config_path is not None else {}

    file_connection = cfg.get("connection", {})
    if not isinstance(file_connection, dict):
        raise ConfigError("'connection' must be a JSON object")
    merged_connection = dict(file_connection)
    for key, value in (connection or {}).items():
        if value:
            merged_connection[key] = value

    resolved_tolerant = tolerant if tolerant is not None else cfg.get("tolerant", False)
    if not isinstance(resolved_tolerant, bool):
        raise ConfigError(f"tolerant must be true or false: {resolved_tolerant!r}")
    raw_log_path = log_path if log_path is not None else cfg.get("log_path", DEFAULT_LOG_PATH)
    raw_days = max_age_days if max_age_days is not None else cfg.get(
        "max_age_log_files", DEFAULT_MAX_AGE_DAYS
    )
    try:
        days = int(raw_days)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"max_age_log_files must be an integer: {raw_days!r}") from exc

    return ImportSettings(
        csv_location=Path(csv_location).expanduser(),
        module_path=Path(module_path).expanduser(),
        log_path=Path(raw_log_path).expanduser(),
        csv_delimiter=csv_delimiter or cfg.get("csv_delimiter", DEFAULT_DELIMITER),
        max_age_log_files=timedelta(days=days),
        connection=merged_connection,
        policies=StagePolicies.tolerant() if resolved_tolerant else StagePolicies.strict(),
        dry_run=dry_run,
    )


__all__ = [
    "DEFAULT_DELIMITER",
    "DEFAULT_LOG_PATH",
    "DEFAULT_MAX_AGE_DAYS",
    "ConfigError",
    "ImportSettings",
    "build_settings",
    "load_config",
]
