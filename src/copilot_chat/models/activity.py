"""
Agent activity models, as received from the agent service.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ADAPTIVE_CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"


class ConversationAccount(BaseModel):
    id: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class ChannelAccount(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class Attachment(BaseModel):
    content_type: str = Field("", alias="contentType")
    content: Optional[Any] = None
    name: Optional[str] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("content_type", mode="before")
    @classmethod
    def null_content_type_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def is_adaptive_card(self) -> bool:
        return self.content_type == ADAPTIVE_CARD_CONTENT_TYPE


class CardAction(BaseModel):
    type: Optional[str] = None
    title: Optional[str] = None
    value: Optional[Any] = None

    model_config = ConfigDict(extra="allow")


class SuggestedActions(BaseModel):
    actions: list[CardAction] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    @field_validator("actions", mode="before")
    @classmethod
    def null_actions_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class Activity(BaseModel):
    type: str = ""
    id: Optional[str] = None
    timestamp: Optional[str] = None
    text: Optional[str] = None
    from_: Optional[ChannelAccount] = Field(None, alias="from")
    conversation: Optional[ConversationAccount] = None
    attachments: list[Attachment] = Field(default_factory=list)
    suggested_actions: Optional[SuggestedActions] = Field(None, alias="suggestedActions")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # the service sends null for absent optional fields
    @field_validator("type", mode="before")
    @classmethod
    def null_type_as_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("attachments", mode="before")
    @classmethod
    def null_attachments_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def conversation_id(self) -> Optional[str]:
        return self.conversation.id if self.conversation else None

    def to_raw(self) -> dict[str, Any]:
        """Wire-shaped dict, kept for diagnostic replay."""
        return self.model_dump(by_alias=True, exclude_unset=True)
