import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from mapchat.core.exceptions import ChatValidationError
from mapchat.core.llm_connection import LLMService, get_llm_service
from mapchat.core.logger import logs
from mapchat.models.base_model import ChatRequest
from mapchat.models.stream_model import DONE_FRAME, EndOfTurn, ErrorNotice, StreamEvent, to_sse
from mapchat.routes.places_route import get_places_service
from mapchat.services.Chat_service import ChatAgent
from mapchat.services.Places_service import PlacesService

router = APIRouter()

# --- Dependency Injection Helper ---
def get_agent(
    llm: LLMService = Depends(get_llm_service),
    places_service: PlacesService = Depends(get_places_service)
) -> ChatAgent:
    return ChatAgent(llm, places_service)

async def sse_frames(events: AsyncIterator[StreamEvent]) -> AsyncIterator[str]:
    """Encode a turn's events as SSE frames, always finishing with [DONE]."""
    chunk_count = 0
    try:
        async for event in events:
            chunk_count += 1
            yield to_sse(event)
    except Exception as e:
        # The stream is already open, tell the client and let it finish cleanly
        logs.log(logging.ERROR, f"[CHAT] Stream error: {str(e)}")
        yield to_sse(ErrorNotice(error=str(e)))
        yield to_sse(EndOfTurn())
    logs.log(logging.INFO, f"[CHAT] Total events sent: {chunk_count}")
    yield DONE_FRAME

# --- The Endpoint ---
@router.post("/chat")
async def chat_endpoint(
    request: ChatRequest,
    agent: ChatAgent = Depends(get_agent)
):
    """
    Runs one chat turn and streams it back as Server-Sent Events.
    Each frame is a place list, a content delta, an error, or the empty end-of-turn delta.
    """
    logs.log(logging.INFO, f"[CHAT] Received request with {len(request.messages)} messages"
                           f"{' + userLocation' if request.userLocation else ''}")
    try:
        events = agent.stream_turn(request.messages, request.userLocation)
    except ChatValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return StreamingResponse(
        sse_frames(events),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"}
    )
