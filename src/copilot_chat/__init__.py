"""
copilot-chat — chat client for Copilot Studio agents.

Delegated token acquisition (silent, then interactive) plus a
conversation-continuity client that normalizes agent replies into one
response envelope.
"""

import logging

from copilot_chat.client import CopilotChat, create_client
from copilot_chat.conversation import ConversationClient
from copilot_chat.auth import SessionAuthenticator
from copilot_chat.config import AgentConfig, ConfigValidation, validate_config
from copilot_chat.errors import (
    CopilotChatError,
    ConfigurationError,
    NotInitializedError,
    AuthError,
    SilentTokenError,
    InteractiveLoginError,
    InteractiveTokenError,
    IdentityProviderError,
    ConversationStartError,
    NoConversationIdError,
    TransportError,
)
from copilot_chat.models.auth import AuthStatus, TokenInfo
from copilot_chat.models.response import ResponseEnvelope

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "CopilotChat",
    "create_client",
    "ConversationClient",
    "SessionAuthenticator",
    "AgentConfig",
    "ConfigValidation",
    "validate_config",
    "CopilotChatError",
    "ConfigurationError",
    "NotInitializedError",
    "AuthError",
    "SilentTokenError",
    "InteractiveLoginError",
    "InteractiveTokenError",
    "IdentityProviderError",
    "ConversationStartError",
    "NoConversationIdError",
    "TransportError",
    "AuthStatus",
    "TokenInfo",
    "ResponseEnvelope",
]
