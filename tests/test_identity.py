"""MsalIdentityProvider adapter over msal.PublicClientApplication."""

from datetime import datetime, timezone

import msal
import pytest

from copilot_chat.errors import IdentityProviderError
from copilot_chat.identity import MsalIdentityProvider, authority_for_tenant

SCOPES = ["https://api.powerplatform.com/.default"]


class FakeMsalApp:
    instances: list["FakeMsalApp"] = []

    def __init__(self, client_id, authority=None, **kwargs):
        self.client_id = client_id
        self.authority = authority
        self.accounts = []
        self.silent_payload = {"access_token": "silent", "expires_in": 3600}
        self.interactive_payload = {
            "access_token": "interactive",
            "expires_in": "1800",
            "id_token_claims": {"preferred_username": "user@contoso.com", "oid": "oid-1"},
        }
        self.interactive_kwargs = None
        FakeMsalApp.instances.append(self)

    def get_accounts(self):
        return list(self.accounts)

    def acquire_token_silent_with_error(self, scopes, account):
        return self.silent_payload

    def acquire_token_interactive(self, scopes, **kwargs):
        self.interactive_kwargs = kwargs
        return self.interactive_payload


@pytest.fixture
def fake_msal(monkeypatch):
    FakeMsalApp.instances = []
    monkeypatch.setattr(msal, "PublicClientApplication", FakeMsalApp)
    return FakeMsalApp


def test_authority_for_tenant():
    assert authority_for_tenant("tenant-1") == "https://login.microsoftonline.com/tenant-1"


@pytest.mark.asyncio
async def test_initialize_builds_app_once(fake_msal):
    provider = MsalIdentityProvider("client-1", authority_for_tenant("tenant-1"))
    await provider.initialize()
    await provider.initialize()
    assert len(fake_msal.instances) == 1
    assert fake_msal.instances[0].client_id == "client-1"
    assert fake_msal.instances[0].authority == "https://login.microsoftonline.com/tenant-1"


@pytest.mark.asyncio
async def test_calls_before_initialize_fail(fake_msal):
    provider = MsalIdentityProvider("client-1", authority_for_tenant("tenant-1"))
    with pytest.raises(IdentityProviderError) as exc_info:
        await provider.get_all_accounts()
    assert exc_info.value.code == "not_initialized"


@pytest.mark.asyncio
async def test_silent_success(fake_msal):
    provider = MsalIdentityProvider("client-1", authority_for_tenant("tenant-1"))
    await provider.initialize()
    before = datetime.now(timezone.utc)
    result = await provider.acquire_token_silent(SCOPES, {"username": "user@contoso.com"})
    assert result.access_token == "silent"
    assert (result.expires_on - before).total_seconds() >= 3599


@pytest.mark.asyncio
async def test_silent_error_payload_maps_to_code(fake_msal):
    provider = MsalIdentityProvider("client-1", authority_for_tenant("tenant-1"))
    await provider.initialize()
    fake_msal.instances[0].silent_payload = {
        "error": "interaction_required",
        "error_description": "AADSTS50076: multi-factor authentication required",
    }
    with pytest.raises(IdentityProviderError) as exc_info:
        await provider.acquire_token_silent(SCOPES, {"username": "user@contoso.com"})
    assert exc_info.value.code == "interaction_required"
    assert "AADSTS50076" in str(exc_info.value)


@pytest.mark.asyncio
async def test_silent_without_cached_token(fake_msal):
    provider = MsalIdentityProvider("client-1", authority_for_tenant("tenant-1"))
    await provider.initialize()
    fake_msal.instances[0].silent_payload = None
    with pytest.raises(IdentityProviderError) as exc_info:
        await provider.acquire_token_silent(SCOPES, {"username": "user@contoso.com"})
    assert exc_info.value.code == "no_token"


@pytest.mark.asyncio
async def test_silent_without_account(fake_msal):
    provider = MsalIdentityProvider("client-1", authority_for_tenant("tenant-1"))
    await provider.initialize()
    with pytest.raises(IdentityProviderError) as exc_info:
        await provider.acquire_token_silent(SCOPES, None)
    assert exc_info.value.code == "no_account"


@pytest.mark.asyncio
async def test_interactive_uses_redirect_port(fake_msal):
    provider = MsalIdentityProvider("client-1", authority_for_tenant("tenant-1"), redirect_uri="http://localhost:8400")
    await provider.initialize()
    result = await provider.login_popup(SCOPES)
    assert result.access_token == "interactive"
    assert result.account == {"username": "user@contoso.com", "home_account_id": "oid-1"}
    assert fake_msal.instances[0].interactive_kwargs == {"port": 8400}


@pytest.mark.asyncio
async def test_interactive_cancelled(fake_msal):
    provider = MsalIdentityProvider("client-1", authority_for_tenant("tenant-1"))
    await provider.initialize()
    fake_msal.instances[0].interactive_payload = {"error": "access_denied", "error_description": "User cancelled"}
    with pytest.raises(IdentityProviderError) as exc_info:
        await provider.login_popup(SCOPES)
    assert exc_info.value.code == "access_denied"
