"""
Activity construction and parsing for the agent service.
"""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from copilot_chat.models.activity import Activity
from copilot_chat.transport.http import SseEvent

logger = logging.getLogger(__name__)

ACTIVITY_EVENT = "activity"


def build_message_activity(text: str, conversation_id: str) -> dict[str, Any]:
    """Build the request body for a user turn."""
    return {
        "activity": {
            "type": "message",
            "text": text,
            "conversation": {"id": conversation_id},
        },
    }


def parse_activity(raw: Any) -> Optional[Activity]:
    """Parse one activity payload. Returns None if invalid."""
    try:
        return Activity.model_validate(raw)
    except ValidationError:
        return None


def activities_from_events(events: list[SseEvent]) -> list[Activity]:
    """Decode the ``activity`` events of a reply stream, in order."""
    activities: list[Activity] = []
    for evt in events:
        if evt.event != ACTIVITY_EVENT or not evt.data:
            continue
        try:
            raw = json.loads(evt.data)
        except json.JSONDecodeError:
            logger.warning("Skipping undecodable activity event: %s", evt.data[:200])
            continue
        activity = parse_activity(raw)
        if activity is None:
            logger.warning("Skipping malformed activity: %s", evt.data[:200])
            continue
        activities.append(activity)
    return activities
