"""Android store app domain models."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AndroidMinimumVersion(str, Enum):
    """Minimum Android release an app requires, as understood by Intune."""

    V4_0 = "v4_0"
    V4_0_3 = "v4_0_3"
    V4_1 = "v4_1"
    V4_2 = "v4_2"
    V4_3 = "v4_3"
    V4_4 = "v4_4"
    V5_0 = "v5_0"
    V5_1 = "v5_1"
    V6_0 = "v6_0"
    V7_0 = "v7_0"
    V7_1 = "v7_1"
    V8_0 = "v8_0"
    V8_1 = "v8_1"
    V9_0 = "v9_0"
    V10_0 = "v10_0"
    V11_0 = "v11_0"

    @classmethod
    def from_string(cls, value: str | None) -> "AndroidMinimumVersion":
        """Parse a version tag such as ``4_0``, ``4.0`` or ``v4_0``.

        Raises:
            ValueError: If the value does not name a known Android version.
        """
        if not value or not value.strip():
            raise ValueError("Minimum Android version is empty")
        normalized = value.strip().lower().replace(".", "_")
        if not normalized.startswith("v"):
            normalized = f"v{normalized}"
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(
                f"Unsupported minimum Android version: {value!r}"
            ) from None

    def to_payload(self) -> dict[str, Any]:
        """Return the ``androidMinimumOperatingSystem`` object with one flag set."""
        return {
            "@odata.type": "microsoft.graph.androidMinimumOperatingSystem",
            self.value: True,
        }


class ApplicationRecord(BaseModel):
    """One row of the import file."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str = Field(alias="Name")
    url: str = Field(alias="URL")
    publisher: str = Field(alias="Publisher")
    description: str = Field(alias="Description")
    # Historical files carry the misspelled header.
    minimum_android_version: str = Field(
        validation_alias=AliasChoices(
            "MininumAndroidVersion",
            "MinimumAndroidVersion",
            "minimum_android_version",
        )
    )
    icon_path: str = Field(alias="Icon")


def mime_type_for(path: str | Path) -> str:
    """Return ``image/<ext>`` for an icon path.

    Raises:
        ValueError: If the path has no extension.
    """
    suffix = Path(path).suffix.lower().lstrip(".")
    if not suffix:
        raise ValueError(f"Cannot derive MIME type, icon has no extension: {path}")
    return f"image/{suffix}"


@dataclass(frozen=True)
class MimeContent:
    """Inline binary content tagged with a MIME type."""

    mime_type: str
    value: bytes

    @classmethod
    def from_file(cls, path: str | Path) -> "MimeContent":
        icon = Path(path)
        mime_type = mime_type_for(icon)
        with open(icon, "rb") as fp:
            data = fp.read()
        return cls(mime_type=mime_type, value=data)

    def to_payload(self) -> dict[str, Any]:
        return {
            "@odata.type": "microsoft.graph.mimeContent",
            "type": self.mime_type,
            "value": base64.b64encode(self.value).decode("ascii"),
        }


@dataclass(frozen=True)
class AndroidStoreApp:
    """Create request for a managed Android store application."""

    display_name: str
    app_store_url: str
    publisher: str
    description: str
    minimum_version: AndroidMinimumVersion
    large_icon: MimeContent

    @classmethod
    def from_record(cls, record: ApplicationRecord) -> "AndroidStoreApp":
        """Build a request from a record, reading its icon from disk.

        Raises:
            OSError: If the icon file cannot be read.
            ValueError: If the icon has no extension or the version is unknown.
        """
        return cls(
            display_name=record.name,
            app_store_url=record.url,
            publisher=record.publisher,
            description=record.description,
            minimum_version=AndroidMinimumVersion.from_string(
                record.minimum_android_version
            ),
            large_icon=MimeContent.from_file(record.icon_path),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "@odata.type": "#microsoft.graph.androidStoreApp",
            "displayName": self.display_name,
            "description": self.description,
            "publisher": self.publisher,
            "appStoreUrl": self.app_store_url,
            "minimumSupportedOperatingSystem": self.minimum_version.to_payload(),
            "largeIcon": self.large_icon.to_payload(),
        }
