"""
Conversation client — one turn in, one ResponseEnvelope out.

Conversation id lifecycle:
- ABSENT -> ACTIVE(id) when a conversation start returns an id
- ACTIVE(id) -> ABSENT on reset_conversation_context() or continue_conversation=False
- no automatic expiry

One caller per instance; concurrent send_message calls on the same instance
race on the conversation id and the transport.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from copilot_chat.auth import SessionAuthenticator
from copilot_chat.config import AgentConfig, ConfigValidation, validate_config
from copilot_chat.errors import ConfigurationError, CopilotChatError, NoConversationIdError, TransportError
from copilot_chat.models.response import (
    ERROR_CONVERSATION_ID,
    ERROR_PREFIX,
    ResponseEnvelope,
    ResponseMetadata,
)
from copilot_chat.replies import AggregatedReply, aggregate_reply
from copilot_chat.transport.copilot import (
    AgentTransport,
    AgentTransportFactory,
    ConnectionSettings,
    CopilotStudioTransport,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def truncate_ms(moment: datetime) -> datetime:
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)


def elapsed_ms(start: datetime, end: datetime) -> int:
    return max(0, (end - start) // timedelta(milliseconds=1))


class ConversationClient:
    def __init__(
        self,
        config: AgentConfig,
        authenticator: Optional[SessionAuthenticator] = None,
        transport_factory: Optional[AgentTransportFactory] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._config = config
        self._auth = authenticator or SessionAuthenticator()
        self._transport_factory = transport_factory or CopilotStudioTransport
        self._clock = clock
        self._transport: Optional[AgentTransport] = None
        self._transport_token: Optional[str] = None
        self._current_conversation_id: Optional[str] = None
        self._initialize_auth()

    def _initialize_auth(self) -> None:
        try:
            self._auth.initialize(self._config)
        except ConfigurationError as e:
            # validate_config() reports the same problem on every turn.
            logger.error("Failed to initialize authenticator: %s", e)

    @property
    def config(self) -> AgentConfig:
        return self._config

    @property
    def authenticator(self) -> SessionAuthenticator:
        return self._auth

    @property
    def conversation_id(self) -> Optional[str]:
        return self._current_conversation_id

    def reset_conversation_context(self) -> None:
        self._current_conversation_id = None

    def validate_config(self) -> ConfigValidation:
        return validate_config(self._config)

    async def send_message(self, text: str, continue_conversation: bool = True) -> ResponseEnvelope:
        """Send one user turn. Never raises; failures come back as success=False envelopes."""
        start = truncate_ms(self._clock())

        validation = self.validate_config()
        if not validation.is_valid:
            error = ConfigurationError(f"Configuration invalid: {', '.join(validation.errors)}", validation.errors)
            return self._error_envelope(error, start)

        try:
            token = await self._auth.acquire_token()
            await self._bind_transport(token)
            conversation_id = await self._resolve_conversation(continue_conversation)
            reply = await self._ask(text, conversation_id)
        except Exception as e:
            return self._error_envelope(e, start)

        return self._success_envelope(reply, conversation_id, start)

    async def _bind_transport(self, token: str) -> None:
        """Build the transport for this token, replacing (and closing) one bound to an older token."""
        if self._transport is not None and self._transport_token == token:
            return
        settings = ConnectionSettings(
            app_client_id=self._config.client_id,
            tenant_id=self._config.tenant_id,
            environment_id=self._config.environment_id,
            agent_identifier=self._config.bot_identifier,
        )
        try:
            transport = self._transport_factory(settings, token)
        except CopilotChatError:
            raise
        except Exception as e:
            raise TransportError(f"Failed to initialize agent transport: {e}") from e

        previous, self._transport, self._transport_token = self._transport, transport, token
        if previous is not None:
            try:
                await previous.aclose()
            except Exception:
                logger.warning("Failed to close replaced agent transport", exc_info=True)

    async def _resolve_conversation(self, continue_conversation: bool) -> str:
        if not continue_conversation:
            self._current_conversation_id = None

        if self._current_conversation_id:
            return self._current_conversation_id

        transport = self._require_transport()
        try:
            activity = await transport.start_conversation(True)
        except CopilotChatError:
            raise
        except Exception as e:
            raise TransportError(f"Failed to communicate with agent: {e}") from e

        conversation_id = activity.conversation_id if activity is not None else None
        if not conversation_id:
            raise NoConversationIdError()

        logger.info("Started conversation %s", conversation_id)
        self._current_conversation_id = conversation_id
        return conversation_id

    async def _ask(self, text: str, conversation_id: str) -> AggregatedReply:
        transport = self._require_transport()
        try:
            activities = await transport.ask_question(text, conversation_id)
        except CopilotChatError:
            raise
        except Exception as e:
            raise TransportError(f"Failed to communicate with agent: {e}") from e
        return aggregate_reply(activities or [])

    def _require_transport(self) -> AgentTransport:
        if self._transport is None:
            raise TransportError("Agent transport not initialized")
        return self._transport

    def _base_metadata(self, start: datetime, end: datetime) -> dict[str, Any]:
        return {
            "duration": elapsed_ms(start, end),
            "start_time": start,
            "end_time": end,
            "bot_id": self._config.bot_identifier,
            "environment_id": self._config.environment_id,
        }

    def _success_envelope(self, reply: AggregatedReply, conversation_id: str, start: datetime) -> ResponseEnvelope:
        end = truncate_ms(self._clock())
        metadata = ResponseMetadata(
            **self._base_metadata(start, end),
            authenticated=True,
            agent_response_id=f"response-{int(end.timestamp() * 1000)}",
            conversation_id=conversation_id,
            suggested_actions=reply.suggested_actions,
            adaptive_cards=reply.adaptive_cards,
            activities_count=len(reply.activities),
            has_text=reply.has_text,
            has_adaptive_cards=reply.has_adaptive_cards,
            has_suggested_actions=reply.has_suggested_actions,
            full_activities=reply.activities,
        )
        return ResponseEnvelope(
            message_text=reply.text,
            success=True,
            timestamp=end,
            conversation_id=conversation_id,
            metadata=metadata,
        )

    def _error_envelope(self, error: BaseException, start: datetime) -> ResponseEnvelope:
        end = truncate_ms(self._clock())
        message = str(error) or type(error).__name__
        logger.error("Agent turn failed: %s", message)
        return ResponseEnvelope(
            message_text=f"{ERROR_PREFIX} {message}",
            success=False,
            timestamp=end,
            conversation_id=ERROR_CONVERSATION_ID,
            metadata=ResponseMetadata(**self._base_metadata(start, end), authenticated=False, error=message),
        )

    async def aclose(self) -> None:
        if self._transport is not None:
            transport = self._transport
            self._transport = None
            self._transport_token = None
            await transport.aclose()

    async def __aenter__(self) -> "ConversationClient":
        return self

    async def __aexit__(self, *_exc: Any) -> None:
        await self.aclose()
