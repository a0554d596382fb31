"""Client side of the /api/chat Server-Sent-Events stream."""
import json
from typing import Iterable, Iterator, Optional

import requests

DATA_PREFIX = "data: "
DONE_MARKER = "[DONE]"


def iter_stream_events(lines: Iterable[str]) -> Iterator[dict]:
    """
    Decode SSE lines into event dicts.
    Yields {"content": ...}, {"type": "places", "data": [...]} or {"error": ...}.
    Stops at the [DONE] frame; frames that are not valid JSON are skipped.
    """
    for line in lines:
        if not line or not line.startswith(DATA_PREFIX):
            continue
        data = line[len(DATA_PREFIX):]
        if data == DONE_MARKER:
            return
        try:
            event = json.loads(data)
        except ValueError:
            continue
        if isinstance(event, dict):
            yield event


def stream_chat(backend_url: str, messages: list, user_location: Optional[dict] = None,
                timeout: float = 45) -> Iterator[dict]:
    """POST the conversation to the backend and yield decoded stream events."""
    with requests.post(
        f"{backend_url}/api/chat",
        json={"messages": messages, "userLocation": user_location},
        stream=True,
        timeout=timeout
    ) as response:
        response.raise_for_status()
        yield from iter_stream_events(response.iter_lines(decode_unicode=True))
