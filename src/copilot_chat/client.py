"""
create_client / CopilotChat — main entry points.
"""

import asyncio
from typing import Any, Mapping, Optional, Union

from copilot_chat.auth import SessionAuthenticator, StatusListener
from copilot_chat.config import AgentConfig, ConfigValidation
from copilot_chat.conversation import ConversationClient
from copilot_chat.models.auth import TokenInfo
from copilot_chat.models.response import ResponseEnvelope


def create_client(config: Union[AgentConfig, Mapping[str, Any]], **kwargs: Any) -> ConversationClient:
    """Bind a configuration to a new ConversationClient.

    ``config`` may be an AgentConfig or a mapping with snake_case or camelCase
    keys. Extra keyword arguments are passed to ConversationClient.
    """
    if not isinstance(config, AgentConfig):
        config = AgentConfig.model_validate(dict(config))
    return ConversationClient(config, **kwargs)


class CopilotChat:
    """Sync wrapper around ConversationClient. Runs the event loop internally.

    The loop is created on construction; use the instance as a context
    manager or call close() to release it.
    """

    def __init__(
        self,
        config: Union[AgentConfig, Mapping[str, Any]],
        authenticator: Optional[SessionAuthenticator] = None,
        **kwargs: Any,
    ):
        self._async = create_client(config, authenticator=authenticator, **kwargs)
        self._loop = asyncio.new_event_loop()

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def client(self) -> ConversationClient:
        return self._async

    @property
    def conversation_id(self) -> Optional[str]:
        return self._async.conversation_id

    def send_message(self, text: str, continue_conversation: bool = True) -> ResponseEnvelope:
        return self._run(self._async.send_message(text, continue_conversation))

    def reset_conversation_context(self) -> None:
        self._async.reset_conversation_context()

    def validate_config(self) -> ConfigValidation:
        return self._async.validate_config()

    def get_token_info(self) -> TokenInfo:
        return self._async.authenticator.get_token_info()

    def on_status_change(self, listener: Optional[StatusListener]) -> None:
        self._async.authenticator.on_status_change(listener)

    def close(self) -> None:
        self._run(self._async.aclose())
        self._loop.close()

    def __enter__(self) -> "CopilotChat":
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()
