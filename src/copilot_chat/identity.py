"""
Identity provider boundary.

SessionAuthenticator talks to any object satisfying ``IdentityProvider``. The
default adapter wraps ``msal.PublicClientApplication``; msal is synchronous,
so every call runs in a worker thread to keep the event loop free.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Protocol
from urllib.parse import urlparse

import msal

from copilot_chat.errors import IdentityProviderError
from copilot_chat.models.auth import AuthenticationResult

logger = logging.getLogger(__name__)

AUTHORITY_HOST = "https://login.microsoftonline.com"
DEFAULT_REDIRECT_URI = "http://localhost"


def authority_for_tenant(tenant_id: str) -> str:
    return f"{AUTHORITY_HOST}/{tenant_id}"


class IdentityProvider(Protocol):
    async def initialize(self) -> None: ...

    async def get_all_accounts(self) -> list[dict[str, Any]]: ...

    async def acquire_token_silent(
        self, scopes: list[str], account: Optional[dict[str, Any]],
    ) -> AuthenticationResult: ...

    async def login_popup(self, scopes: list[str]) -> AuthenticationResult: ...


IdentityProviderFactory = Callable[[str, str, str], IdentityProvider]


def _to_result(payload: Optional[dict[str, Any]]) -> AuthenticationResult:
    """Convert an msal result dict, raising IdentityProviderError on error payloads."""
    if not payload:
        raise IdentityProviderError("no_token", "Identity provider returned no token")
    if "access_token" not in payload:
        raise IdentityProviderError(
            payload.get("error", "unknown_error"),
            payload.get("error_description") or payload.get("error") or "Token request failed",
        )
    expires_on = None
    if payload.get("expires_in") is not None:
        expires_on = datetime.now(timezone.utc) + timedelta(seconds=int(payload["expires_in"]))
    claims = payload.get("id_token_claims") or {}
    account = {"username": claims.get("preferred_username"), "home_account_id": claims.get("oid")} if claims else None
    return AuthenticationResult(access_token=payload["access_token"], expires_on=expires_on, account=account)


class MsalIdentityProvider:
    """``IdentityProvider`` backed by an msal public client application."""

    def __init__(self, client_id: str, authority: str, redirect_uri: str = DEFAULT_REDIRECT_URI):
        self._client_id = client_id
        self._authority = authority
        self._redirect_uri = redirect_uri
        self._app: Optional[msal.PublicClientApplication] = None

    async def initialize(self) -> None:
        # Constructing the application performs authority discovery over the network.
        if self._app is None:
            self._app = await asyncio.to_thread(
                msal.PublicClientApplication, self._client_id, authority=self._authority,
            )

    def _require_app(self) -> msal.PublicClientApplication:
        if self._app is None:
            raise IdentityProviderError("not_initialized", "Identity provider not initialized")
        return self._app

    async def get_all_accounts(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._require_app().get_accounts)

    async def acquire_token_silent(
        self, scopes: list[str], account: Optional[dict[str, Any]],
    ) -> AuthenticationResult:
        if account is None:
            raise IdentityProviderError("no_account", "No account available for silent acquisition")
        app = self._require_app()
        payload = await asyncio.to_thread(app.acquire_token_silent_with_error, scopes, account)
        return _to_result(payload)

    async def login_popup(self, scopes: list[str]) -> AuthenticationResult:
        app = self._require_app()
        port = urlparse(self._redirect_uri).port
        logger.info("Opening browser for interactive sign-in")
        payload = await asyncio.to_thread(app.acquire_token_interactive, scopes, port=port)
        return _to_result(payload)
