"""
HTTP client for the agent service — JSON requests with text/event-stream replies.
"""

import logging
from typing import Any, Iterable, Optional

import httpx

from copilot_chat.errors import TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "copilot-chat/0.1.0"


class SseEvent:
    __slots__ = ("event", "data")

    def __init__(self, event: str, data: str):
        self.event = event
        self.data = data

    def __repr__(self) -> str:
        return f"SseEvent(event={self.event!r})"


def parse_sse_lines(lines: Iterable[str]) -> list[SseEvent]:
    """Parse server-sent event lines; stops after an ``end`` event."""
    events: list[SseEvent] = []
    event_name = "message"
    data_lines: list[str] = []

    def dispatch() -> Optional[SseEvent]:
        nonlocal event_name, data_lines
        evt = None
        if data_lines or event_name != "message":
            evt = SseEvent(event_name, "\n".join(data_lines))
        event_name = "message"
        data_lines = []
        return evt

    for raw_line in lines:
        line = raw_line.rstrip("\r")
        if not line:
            evt = dispatch()
            if evt is not None:
                events.append(evt)
                if evt.event == "end":
                    return events
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            event_name = value
        elif field == "data":
            data_lines.append(value)

    evt = dispatch()
    if evt is not None:
        events.append(evt)
    return events


class HttpClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json", "Accept": "text/event-stream"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def post_events(
        self,
        path: str,
        body: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> tuple[httpx.Headers, list[SseEvent]]:
        """POST a JSON body and collect the event stream in the reply."""
        logger.debug("POST %s", path)
        try:
            async with self._client.stream("POST", path, json=body, params=params, headers=self._headers()) as resp:
                if resp.status_code >= 400:
                    await resp.aread()
                    raise TransportError(f"HTTP {resp.status_code}: {resp.text[:200]}", status_code=resp.status_code)
                lines = [line async for line in resp.aiter_lines()]
                return resp.headers, parse_sse_lines(lines)
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {path} failed: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()
