"""
Session authenticator — delegated token acquisition for the agent API.

Token acquisition order:
1. cached token still valid -> return it, no provider call
2. no accounts -> interactive login
3. silent acquisition with the first account
4. silent failure -> interactive acquisition with the same scope

Every success and failure is pushed to the registered status listener.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from copilot_chat.config import AgentConfig
from copilot_chat.errors import (
    ConfigurationError,
    CopilotChatError,
    IdentityProviderError,
    InteractiveLoginError,
    InteractiveTokenError,
    NotInitializedError,
    SilentTokenError,
)
from copilot_chat.identity import (
    DEFAULT_REDIRECT_URI,
    IdentityProvider,
    IdentityProviderFactory,
    MsalIdentityProvider,
    authority_for_tenant,
)
from copilot_chat.models.auth import (
    AuthenticationResult,
    AuthErrorInfo,
    AuthStatus,
    CachedToken,
    TokenInfo,
)

logger = logging.getLogger(__name__)

POWER_PLATFORM_SCOPE = "https://api.powerplatform.com/.default"

StatusListener = Callable[[AuthStatus], None]

_SILENT_REASONS = {
    "no_account": SilentTokenError.NO_ACCOUNT,
    "interaction_required": SilentTokenError.INTERACTION_REQUIRED,
    "invalid_grant": SilentTokenError.INTERACTION_REQUIRED,
    "consent_required": SilentTokenError.CONSENT_REQUIRED,
    "login_required": SilentTokenError.LOGIN_REQUIRED,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _error_message(error: BaseException) -> str:
    return str(error) or type(error).__name__


def classify_silent_failure(error: BaseException) -> SilentTokenError:
    """Map a silent-acquisition failure to a tagged SilentTokenError."""
    if isinstance(error, SilentTokenError):
        return error
    if isinstance(error, IdentityProviderError):
        reason = _SILENT_REASONS.get(error.code, SilentTokenError.UNKNOWN)
    elif isinstance(error, (ConnectionError, TimeoutError, OSError)):
        reason = SilentTokenError.NETWORK
    else:
        reason = SilentTokenError.UNKNOWN
    return SilentTokenError(f"Silent token acquisition failed: {_error_message(error)}", reason=reason)


class SessionAuthenticator:
    def __init__(
        self,
        provider_factory: Optional[IdentityProviderFactory] = None,
        scopes: Optional[list[str]] = None,
        redirect_uri: str = DEFAULT_REDIRECT_URI,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._provider_factory = provider_factory or MsalIdentityProvider
        self._scopes = scopes or [POWER_PLATFORM_SCOPE]
        self._redirect_uri = redirect_uri
        self._clock = clock
        self._config: Optional[AgentConfig] = None
        self._provider: Optional[IdentityProvider] = None
        self._provider_ready = False
        self._token: Optional[CachedToken] = None
        self._listener: Optional[StatusListener] = None

    @property
    def initialized(self) -> bool:
        return self._provider is not None and self._config is not None

    def on_status_change(self, listener: Optional[StatusListener]) -> None:
        """Register the single status listener (replaces any previous one; None clears)."""
        self._listener = listener

    def initialize(self, config: AgentConfig) -> None:
        if not config.client_id or not config.tenant_id:
            error = ConfigurationError("ClientId and TenantId are required for authentication")
            self._notify_error(error)
            raise error

        self._config = config
        self._provider = self._provider_factory(
            config.client_id, authority_for_tenant(config.tenant_id), self._redirect_uri,
        )
        self._provider_ready = False
        self._token = None

    async def acquire_token(self) -> str:
        if self._token is not None and self._token.is_valid(self._clock()):
            logger.debug("Using cached access token")
            return self._token.access_token

        try:
            provider = self._require_provider()
            await self._ensure_provider_ready(provider)
            accounts = await self._ensure_user_is_logged_in(provider)
            result = await self._acquire_silent_or_interactive(provider, accounts)
        except CopilotChatError as e:
            self._notify_error(e)
            raise
        except Exception as e:
            # Provider bugs surface with the same shape as provider errors.
            error = IdentityProviderError("provider_error", _error_message(e))
            self._notify_error(error)
            raise error from e

        self._token = CachedToken(access_token=result.access_token, expires_at=result.expires_on)
        self._notify_success()
        return result.access_token

    def get_token_info(self) -> TokenInfo:
        token = self._token
        return TokenInfo(
            has_token=token is not None and bool(token.access_token),
            expires_at=token.expires_at if token else None,
            is_valid=token is not None and token.is_valid(self._clock()),
        )

    def clear_token(self) -> None:
        self._token = None

    def _require_provider(self) -> IdentityProvider:
        if self._provider is None or self._config is None:
            raise NotInitializedError()
        return self._provider

    async def _ensure_provider_ready(self, provider: IdentityProvider) -> None:
        if not self._provider_ready:
            await provider.initialize()
            self._provider_ready = True

    async def _ensure_user_is_logged_in(self, provider: IdentityProvider) -> list[dict[str, Any]]:
        accounts = await provider.get_all_accounts()
        if accounts:
            return accounts

        logger.info("No existing accounts found, starting interactive login")
        try:
            await provider.login_popup(self._scopes)
        except Exception as e:
            raise InteractiveLoginError(f"Interactive login failed: {_error_message(e)}", cause=e) from e
        return await provider.get_all_accounts()

    async def _acquire_silent_or_interactive(
        self, provider: IdentityProvider, accounts: list[dict[str, Any]],
    ) -> AuthenticationResult:
        try:
            return await self._acquire_silent(provider, accounts)
        except SilentTokenError as silent_error:
            logger.warning("Silent token acquisition failed (%s), falling back to interactive", silent_error.reason)
            return await self._acquire_interactive(provider, silent_error)

    async def _acquire_silent(
        self, provider: IdentityProvider, accounts: list[dict[str, Any]],
    ) -> AuthenticationResult:
        if not accounts:
            raise SilentTokenError("No account available for silent acquisition", reason=SilentTokenError.NO_ACCOUNT)
        try:
            return await provider.acquire_token_silent(self._scopes, accounts[0])
        except Exception as e:
            raise classify_silent_failure(e) from e

    async def _acquire_interactive(
        self, provider: IdentityProvider, silent_error: SilentTokenError,
    ) -> AuthenticationResult:
        try:
            return await provider.login_popup(self._scopes)
        except Exception as e:
            raise InteractiveTokenError(
                f"Interactive token acquisition failed: {_error_message(e)}",
                cause=e,
                silent_reason=silent_error.reason,
            ) from e

    def _notify(self, status: AuthStatus) -> None:
        if self._listener is None:
            return
        try:
            self._listener(status)
        except Exception:
            logger.warning("Auth status listener raised", exc_info=True)

    def _notify_success(self) -> None:
        self._notify(AuthStatus(is_authenticated=True, token_info=self.get_token_info()))

    def _notify_error(self, error: BaseException) -> None:
        code = error.code if isinstance(error, CopilotChatError) else "unknown_error"
        self._notify(AuthStatus(
            is_authenticated=False,
            error=AuthErrorInfo(
                name=type(error).__name__,
                message=_error_message(error),
                code=code,
                timestamp=self._clock(),
            ),
        ))
