from .app import (
    AndroidMinimumVersion,
    AndroidStoreApp,
    ApplicationRecord,
    MimeContent,
    mime_type_for,
)

__all__ = [
    "AndroidMinimumVersion",
    "AndroidStoreApp",
    "ApplicationRecord",
    "MimeContent",
    "mime_type_for",
]
