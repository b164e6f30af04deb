"""
Response envelope returned by ConversationClient.send_message.

Serializes with camelCase keys (``messageText``, ``hasAdaptiveCards``, ...) via
``model_dump(by_alias=True)``.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

ERROR_CONVERSATION_ID = "error"
ERROR_PREFIX = "API Error:"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuggestedAction(_CamelModel):
    title: Optional[str] = None
    value: Optional[Any] = None


class AdaptiveCard(_CamelModel):
    content: Optional[Any] = None
    content_type: str
    name: str = "Adaptive Card"


class ResponseMetadata(_CamelModel):
    duration: int
    start_time: datetime
    end_time: datetime
    bot_id: str = ""
    environment_id: str = ""
    authenticated: bool = False
    agent_response_id: Optional[str] = None
    conversation_id: Optional[str] = None
    suggested_actions: list[SuggestedAction] = []
    adaptive_cards: list[AdaptiveCard] = []
    activities_count: int = 0
    has_text: bool = False
    has_adaptive_cards: bool = False
    has_suggested_actions: bool = False
    full_activities: list[dict[str, Any]] = []
    error: Optional[str] = None


class ResponseEnvelope(_CamelModel):
    message_text: str
    success: bool
    timestamp: datetime
    conversation_id: str
    metadata: ResponseMetadata
