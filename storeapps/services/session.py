"""Establish the authenticated management session."""

from __future__ import annotations

from typing import Any, Mapping

from storeapps.infrastructure.modules import ManagementApi
from storeapps.infrastructure.observability import get_logger

logger = get_logger(__name__)


class SessionConnectError(Exception):
    """Raised when the management module cannot open a session."""


def connect_session(api: ManagementApi, settings: Mapping[str, Any]) -> Any:
    """Open a session through ``api.connect`` and return its handle.

    Raises:
        SessionConnectError: Wrapping whatever the module raised.
    """
    logger.info("Connecting to the management tenant via %s", api.name)
    try:
        session = api.connect(settings)
    except Exception as exc:
        raise SessionConnectError(f"Connecting to the tenant failed: {exc}") from exc
    if session is None:
        raise SessionConnectError(f"Module {api.name} returned no session")
    logger.info("Connected to the management tenant")
    return session


__all__ = ["SessionConnectError", "connect_session"]
