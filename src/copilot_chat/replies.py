"""
Reply normalization.

Each agent activity is split into tagged reply parts before aggregation, so the
aggregation below never inspects transport fields directly:

- TextSegment: a non-blank text segment of a message activity
- CardAttachment: an adaptive card attachment
- SuggestedActionPart: one suggested follow-up action

Only ``message`` activities contribute parts; every activity is still kept in
the raw sequence for diagnostics.
"""

from typing import Annotated, Any, Iterable, Literal, Optional, Union

from pydantic import BaseModel, Field

from copilot_chat.models.activity import Activity
from copilot_chat.models.response import AdaptiveCard, SuggestedAction

MESSAGE_ACTIVITY = "message"
TEXT_SEPARATOR = "\n\n"
DEFAULT_CARD_NAME = "Adaptive Card"


class TextSegment(BaseModel):
    kind: Literal["text"] = "text"
    text: str


class CardAttachment(BaseModel):
    kind: Literal["card"] = "card"
    content: Optional[Any] = None
    content_type: str
    name: str = DEFAULT_CARD_NAME


class SuggestedActionPart(BaseModel):
    kind: Literal["suggested_action"] = "suggested_action"
    title: Optional[str] = None
    value: Optional[Any] = None


ReplyPart = Annotated[
    Union[TextSegment, CardAttachment, SuggestedActionPart],
    Field(discriminator="kind"),
]


class AggregatedReply(BaseModel):
    text: str = ""
    adaptive_cards: list[AdaptiveCard] = []
    suggested_actions: list[SuggestedAction] = []
    activities: list[dict[str, Any]] = []

    @property
    def has_text(self) -> bool:
        return bool(self.text)

    @property
    def has_adaptive_cards(self) -> bool:
        return len(self.adaptive_cards) > 0

    @property
    def has_suggested_actions(self) -> bool:
        return len(self.suggested_actions) > 0


def coerce_activity(raw: Union[Activity, dict[str, Any]]) -> Activity:
    if isinstance(raw, Activity):
        return raw
    return Activity.model_validate(raw)


def parts_from_activity(activity: Activity) -> list[ReplyPart]:
    """Split one activity into reply parts, in the order they appear."""
    if activity.type != MESSAGE_ACTIVITY:
        return []

    parts: list[ReplyPart] = []
    if activity.text and activity.text.strip():
        parts.append(TextSegment(text=activity.text.strip()))

    for attachment in activity.attachments:
        if attachment.is_adaptive_card:
            parts.append(CardAttachment(
                content=attachment.content,
                content_type=attachment.content_type,
                name=attachment.name or DEFAULT_CARD_NAME,
            ))

    if activity.suggested_actions:
        for action in activity.suggested_actions.actions:
            parts.append(SuggestedActionPart(title=action.title, value=action.value))

    return parts


def aggregate_reply(raw_activities: Iterable[Union[Activity, dict[str, Any]]]) -> AggregatedReply:
    texts: list[str] = []
    cards: list[AdaptiveCard] = []
    actions: list[SuggestedAction] = []
    activities: list[dict[str, Any]] = []

    for raw in raw_activities:
        activity = coerce_activity(raw)
        activities.append(activity.to_raw())
        for part in parts_from_activity(activity):
            if isinstance(part, TextSegment):
                texts.append(part.text)
            elif isinstance(part, CardAttachment):
                cards.append(AdaptiveCard(content=part.content, content_type=part.content_type, name=part.name))
            else:
                actions.append(SuggestedAction(title=part.title, value=part.value))

    return AggregatedReply(
        text=TEXT_SEPARATOR.join(texts),
        adaptive_cards=cards,
        suggested_actions=actions,
        activities=activities,
    )
