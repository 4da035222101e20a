"""Microsoft Graph client for Intune app management.

This module centralises HTTP access to the Intune tenant. It maintains a
:class:`requests.Session`, obtains an app-only access token with the OAuth2
client credentials grant, refreshes the token shortly before it expires and
maps HTTP failures onto module-specific exceptions. Admin consent for the app
registration must have been granted beforehand.

The module-level :func:`connect` and :func:`create_android_store_app` make it
usable as the management module loaded by ``--intune-module``.
"""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Any, Mapping

import requests
from requests import Response, Session

from storeapps.infrastructure.observability import get_logger

DEFAULT_AUTHORITY = "https://login.microsoftonline.com"
DEFAULT_GRAPH_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_SCOPE = "https://graph.microsoft.com/.default"
MOBILE_APPS_PATH = "/deviceAppManagement/mobileApps"

# Fixed name: the module is also loaded by path under a generated name.
logger = get_logger("storeapps.infrastructure.graph.client")


class AuthenticationError(Exception):
    """Raised when a token cannot be obtained or the tenant rejects it."""


class GraphRequestError(Exception):
    """Raised when a Graph API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class ClientCredentials:
    """App registration used for the client credentials grant."""

    tenant_id: str
    client_id: str
    client_secret: str
    authority: str = DEFAULT_AUTHORITY
    scope: str = DEFAULT_SCOPE

    @property
    def token_url(self) -> str:
        return f"{self.authority.rstrip('/')}/{self.tenant_id}/oauth2/v2.0/token"

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "ClientCredentials":
        missing = [
            key
            for key in ("tenant_id", "client_id", "client_secret")
            if not settings.get(key)
        ]
        if missing:
            raise AuthenticationError(
                f"Missing connection settings: {', '.join(missing)}"
            )
        return cls(
            tenant_id=str(settings["tenant_id"]),
            client_id=str(settings["client_id"]),
            client_secret=str(settings["client_secret"]),
            authority=str(settings.get("authority") or DEFAULT_AUTHORITY),
            scope=str(settings.get("scope") or DEFAULT_SCOPE),
        )


@dataclass
class AccessToken:
    """Bearer token with its absolute expiry time."""

    value: str
    expires_at: float

    def is_expired(self, skew_seconds: float = 60.0) -> bool:
        return time.time() >= self.expires_at - skew_seconds


class GraphSession:
    """Authenticated Graph helper with token management."""

    def __init__(
        self,
        credentials: ClientCredentials,
        *,
        base_url: str = DEFAULT_GRAPH_URL,
        timeout: float = 30.0,
        session: Session | None = None,
    ) -> None:
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token: AccessToken | None = None

    # -------------------- auth workflow --------------------
    def authenticate(self, *, force: bool = False) -> None:
        """Ensure a valid access token is held.

        Raises:
            AuthenticationError: If the token endpoint rejects the request.
        """
        if not force and self.token is not None and not self.token.is_expired():
            return

        data = {
            "grant_type": "client_credentials",
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
            "scope": self.credentials.scope,
        }
        try:
            response = self.session.post(
                self.credentials.token_url, data=data, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error(f"Token request failed: {exc}")
            raise AuthenticationError(f"Token request failed: {exc}") from exc

        if response.status_code >= 400:
            detail = _error_detail(response)
            logger.error(f"Token request rejected ({response.status_code}): {detail}")
            raise AuthenticationError(
                f"Token request rejected ({response.status_code}): {detail}"
            )
        try:
            payload = response.json()
            self.token = AccessToken(
                value=payload["access_token"],
                expires_at=time.time() + float(payload.get("expires_in", 3600)),
            )
        except (ValueError, KeyError) as exc:
            raise AuthenticationError(f"Malformed token response: {exc}") from exc
        logger.info("Authenticated against tenant %s", self.credentials.tenant_id)

    # -------------------- request helpers --------------------
    def _prepare_headers(self) -> dict[str, str]:
        from storeapps import __version__

        if self.token is None:
            raise AuthenticationError("No access token; authenticate first.")
        return {
            "Authorization": f"Bearer {self.token.value}",
            "Content-Type": "application/json",
            "User-Agent": f"storeapps/{__version__}",
        }

    def post_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Authenticated POST returning the parsed JSON body."""
        self.authenticate()
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.post(
                url, json=payload, headers=self._prepare_headers(), timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise GraphRequestError(f"Request to {url} failed: {exc}") from exc
        self._raise_for_status(response)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise GraphRequestError(f"Failed to parse JSON response: {exc}") from exc

    def _raise_for_status(self, response: Response) -> None:
        """
        Raise custom exceptions for HTTP error status codes.
        """
        if response.status_code == 401:
            raise AuthenticationError("Access token rejected; authenticate again.")
        if response.status_code == 403:
            raise AuthenticationError(
                "Permission denied; the app registration needs "
                "DeviceManagementApps.ReadWrite.All."
            )
        if response.status_code >= 400:
            raise GraphRequestError(
                f"Graph request failed ({response.status_code}): "
                f"{_error_detail(response)}",
                status_code=response.status_code,
            )


def _error_detail(response: Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    error = body.get("error")
    if isinstance(error, dict):
        return str(error.get("message") or error.get("code") or error)
    return str(body.get("error_description") or error or body)[:200]


# -------------------- management module entry points --------------------
def connect(settings: Mapping[str, Any]) -> GraphSession:
    """Return an authenticated :class:`GraphSession` for ``settings``.

    ``settings`` must hold ``tenant_id``, ``client_id`` and ``client_secret``;
    ``authority``, ``scope`` and ``graph_url`` are optional.
    """
    credentials = ClientCredentials.from_settings(settings)
    session = GraphSession(
        credentials, base_url=str(settings.get("graph_url") or DEFAULT_GRAPH_URL)
    )
    session.authenticate()
    return session


def create_android_store_app(
    session: GraphSession, payload: dict[str, Any]
) -> dict[str, Any]:
    """Create an ``androidStoreApp`` and return the created resource."""
    return session.post_json(MOBILE_APPS_PATH, payload)


__all__ = [
    "AccessToken",
    "AuthenticationError",
    "ClientCredentials",
    "GraphRequestError",
    "GraphSession",
    "connect",
    "create_android_store_app",
]
