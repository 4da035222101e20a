"""Domain models for Android store app imports."""

from .models import (
    AndroidMinimumVersion,
    AndroidStoreApp,
    ApplicationRecord,
    MimeContent,
)

__all__ = [
    "AndroidMinimumVersion",
    "AndroidStoreApp",
    "ApplicationRecord",
    "MimeContent",
]
