"""
Copilot Studio agent transport — Power Platform direct-to-engine API.

Each environment has its own host, derived from the environment id:
``{id[:-2]}.{id[-2:]}.environment.{cloud_suffix}`` with dashes removed.
Replies are event streams of ``activity`` events terminated by ``end``.
"""

import logging
from typing import Callable, Optional, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field

from copilot_chat.errors import TransportError
from copilot_chat.models.activity import Activity, ConversationAccount
from copilot_chat.transport.activities import activities_from_events, build_message_activity
from copilot_chat.transport.http import HttpClient

logger = logging.getLogger(__name__)

DEFAULT_CLOUD_SUFFIX = "api.powerplatform.com"
DEFAULT_API_VERSION = "2022-03-01-preview"
CONVERSATION_ID_HEADER = "x-ms-conversationid"
ENVIRONMENT_ID_SUFFIX_LENGTH = 2


class ConnectionSettings(BaseModel):
    app_client_id: str = Field(alias="appClientId")
    tenant_id: str = Field(alias="tenantId")
    environment_id: str = Field(alias="environmentId")
    agent_identifier: str = Field(alias="agentIdentifier")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class AgentTransport(Protocol):
    async def start_conversation(self, emit_start_conversation_event: bool = True) -> Activity: ...

    async def ask_question(self, text: str, conversation_id: str) -> list[Activity]: ...

    async def aclose(self) -> None: ...


AgentTransportFactory = Callable[[ConnectionSettings, str], AgentTransport]


def environment_host(environment_id: str, cloud_suffix: str = DEFAULT_CLOUD_SUFFIX) -> str:
    normalized = environment_id.lower().replace("-", "")
    if len(normalized) <= ENVIRONMENT_ID_SUFFIX_LENGTH:
        raise TransportError(f"Invalid environment ID: {environment_id!r}")
    prefix = normalized[:-ENVIRONMENT_ID_SUFFIX_LENGTH]
    suffix = normalized[-ENVIRONMENT_ID_SUFFIX_LENGTH:]
    return f"{prefix}.{suffix}.environment.{cloud_suffix}"


def conversations_path(agent_identifier: str, conversation_id: Optional[str] = None) -> str:
    path = f"/copilotstudio/dataverse-backed/authenticated/bots/{agent_identifier}/conversations"
    if conversation_id:
        path += f"/{conversation_id}"
    return path


class CopilotStudioTransport:
    def __init__(
        self,
        settings: ConnectionSettings,
        token: str,
        cloud_suffix: str = DEFAULT_CLOUD_SUFFIX,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._api_version = api_version
        self._http = HttpClient(
            base_url=f"https://{environment_host(settings.environment_id, cloud_suffix)}",
            token=token,
            timeout=timeout,
            transport=http_transport,
        )

    def _params(self) -> dict[str, str]:
        return {"api-version": self._api_version}

    async def start_conversation(self, emit_start_conversation_event: bool = True) -> Activity:
        """Start a conversation; the returned activity carries ``conversation.id``."""
        headers, events = await self._http.post_events(
            conversations_path(self._settings.agent_identifier),
            {"emitStartConversationEvent": emit_start_conversation_event},
            params=self._params(),
        )
        activities = activities_from_events(events)
        conversation_id = headers.get(CONVERSATION_ID_HEADER)
        if not conversation_id:
            conversation_id = next((a.conversation_id for a in activities if a.conversation_id), None)

        first = activities[0] if activities else Activity(type="event")
        logger.debug("Start conversation returned %d activities", len(activities))
        return first.model_copy(update={"conversation": ConversationAccount(id=conversation_id)})

    async def ask_question(self, text: str, conversation_id: str) -> list[Activity]:
        _headers, events = await self._http.post_events(
            conversations_path(self._settings.agent_identifier, conversation_id),
            build_message_activity(text, conversation_id),
            params=self._params(),
        )
        return activities_from_events(events)

    async def aclose(self) -> None:
        await self._http.close()
