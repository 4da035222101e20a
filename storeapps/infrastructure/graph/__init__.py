"""Microsoft Graph adapter for Intune.

This package doubles as a management module: pass its directory to
``--intune-module`` to create apps through Graph directly.
"""

from .client import (
    AccessToken,
    AuthenticationError,
    ClientCredentials,
    GraphRequestError,
    GraphSession,
    connect,
    create_android_store_app,
)

__all__ = [
    "AccessToken",
    "AuthenticationError",
    "ClientCredentials",
    "GraphRequestError",
    "GraphSession",
    "connect",
    "create_android_store_app",
]
