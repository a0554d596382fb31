"""
Events carried on the multiplexed chat stream.

Each chat turn produces a sequence of tagged events. On the wire every event
is one Server-Sent-Events frame whose data is a JSON object:

    ContentDelta   -> {"content": "<text>"}
    PlacesPayload  -> {"type": "places", "data": [<place>, ...]}
    ErrorNotice    -> {"error": "<message>"}
    EndOfTurn      -> {"content": ""}
"""
import json
from typing import Any, Dict, List, Literal

from pydantic import BaseModel

from mapchat.models.places_model import PlaceRecord

DONE_FRAME = "data: [DONE]\n\n"

class StreamEvent(BaseModel):
    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

class ContentDelta(StreamEvent):
    content: str

class PlacesPayload(StreamEvent):
    type: Literal["places"] = "places"
    data: List[PlaceRecord]

class ErrorNotice(StreamEvent):
    error: str

class EndOfTurn(StreamEvent):
    def to_payload(self) -> Dict[str, Any]:
        return {"content": ""}

def to_sse(event: StreamEvent) -> str:
    """Frame one event as an SSE `data:` line"""
    return f"data: {json.dumps(event.to_payload())}\n\n"
