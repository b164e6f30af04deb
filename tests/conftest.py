"""Shared fakes for the identity provider and agent transport."""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from copilot_chat.auth import SessionAuthenticator
from copilot_chat.config import AgentConfig
from copilot_chat.models.activity import Activity, ConversationAccount
from copilot_chat.models.auth import AuthenticationResult
from copilot_chat.transport.copilot import ConnectionSettings

CLIENT_ID = "6f1c2b1e-8a3d-4c5e-9f7a-1b2c3d4e5f60"
TENANT_ID = "0a1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c4d"
BOT_IDENTIFIER = "cr123_helpdeskAgent"
ENVIRONMENT_ID = "a1b2c3d4-e5f6-7890-abcd-ef1234567890"


class Clock:
    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now += timedelta(**kwargs)


class FakeIdentityProvider:
    def __init__(self, clock: Clock):
        self.clock = clock
        self.accounts: list[dict[str, Any]] = [{"username": "user@contoso.com"}]
        self.silent_error: Optional[Exception] = None
        self.popup_error: Optional[Exception] = None
        self.silent_token = "silent-token"
        self.popup_token = "popup-token"
        self.lifetime = timedelta(hours=1)
        self.created_with: Optional[tuple[str, str, str]] = None
        self.initialize_calls = 0
        self.account_calls = 0
        self.silent_calls = 0
        self.popup_calls = 0

    @property
    def total_calls(self) -> int:
        return self.initialize_calls + self.account_calls + self.silent_calls + self.popup_calls

    async def initialize(self) -> None:
        self.initialize_calls += 1

    async def get_all_accounts(self) -> list[dict[str, Any]]:
        self.account_calls += 1
        return list(self.accounts)

    async def acquire_token_silent(self, scopes: list[str], account: Optional[dict[str, Any]]) -> AuthenticationResult:
        self.silent_calls += 1
        if self.silent_error is not None:
            raise self.silent_error
        return AuthenticationResult(access_token=self.silent_token, expires_on=self.clock() + self.lifetime)

    async def login_popup(self, scopes: list[str]) -> AuthenticationResult:
        self.popup_calls += 1
        if self.popup_error is not None:
            raise self.popup_error
        if not self.accounts:
            self.accounts.append({"username": "user@contoso.com"})
        return AuthenticationResult(access_token=self.popup_token, expires_on=self.clock() + self.lifetime)


class FakeTransport:
    def __init__(self, owner: "FakeTransportFactory", settings: ConnectionSettings, token: str):
        self.owner = owner
        self.settings = settings
        self.token = token
        self.closed = False

    async def start_conversation(self, emit_start_conversation_event: bool = True) -> Activity:
        self.owner.start_calls += 1
        conversation_id = self.owner.conversation_ids.pop(0) if self.owner.conversation_ids else None
        return Activity(type="event", conversation=ConversationAccount(id=conversation_id))

    async def ask_question(self, text: str, conversation_id: str) -> list[Any]:
        self.owner.questions.append((text, conversation_id))
        if self.owner.ask_error is not None:
            raise self.owner.ask_error
        return list(self.owner.replies)

    async def aclose(self) -> None:
        self.closed = True


class FakeTransportFactory:
    def __init__(self) -> None:
        self.instances: list[FakeTransport] = []
        self.conversation_ids: list[Optional[str]] = ["conv-1", "conv-2", "conv-3"]
        self.replies: list[Any] = [{"type": "message", "text": "Hello"}]
        self.ask_error: Optional[Exception] = None
        self.start_calls = 0
        self.questions: list[tuple[str, str]] = []

    def __call__(self, settings: ConnectionSettings, token: str) -> FakeTransport:
        transport = FakeTransport(self, settings, token)
        self.instances.append(transport)
        return transport

    @property
    def calls(self) -> int:
        return len(self.instances) + self.start_calls + len(self.questions)


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def provider(clock: Clock) -> FakeIdentityProvider:
    return FakeIdentityProvider(clock)


@pytest.fixture
def authenticator(provider: FakeIdentityProvider, clock: Clock) -> SessionAuthenticator:
    def factory(client_id: str, authority: str, redirect_uri: str) -> FakeIdentityProvider:
        provider.created_with = (client_id, authority, redirect_uri)
        return provider

    return SessionAuthenticator(provider_factory=factory, clock=clock)


@pytest.fixture
def transports() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
def config() -> AgentConfig:
    return AgentConfig(
        client_id=CLIENT_ID,
        tenant_id=TENANT_ID,
        bot_identifier=BOT_IDENTIFIER,
        environment_id=ENVIRONMENT_ID,
    )
