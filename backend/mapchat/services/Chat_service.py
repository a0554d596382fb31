import asyncio
import logging
import time
from typing import AsyncIterator, Optional, Sequence

from mapchat.core.config import settings
from mapchat.core.exceptions import ChatValidationError
from mapchat.core.llm_connection import LLMService
from mapchat.core.logger import logs
from mapchat.models.base_model import ChatMessage, Coordinates, LocationIntent, MessageRole
from mapchat.models.places_model import PlaceRecord
from mapchat.models.stream_model import ContentDelta, EndOfTurn, ErrorNotice, PlacesPayload, StreamEvent
from mapchat.services.Places_service import PlacesService

_STREAM_DONE = object()


class ChatAgent:
    """
    Runs one chat turn: intent extraction -> places search -> narration,
    multiplexed onto a single stream of events.
    """

    def __init__(
        self,
        llm: LLMService,
        places_service: PlacesService,
        intent_timeout: float = settings.INTENT_TIMEOUT,
        narration_timeout: float = settings.NARRATION_TIMEOUT,
    ):
        self.llm = llm
        self.places_service = places_service
        self.intent_timeout = intent_timeout
        self.narration_timeout = narration_timeout

    @staticmethod
    def last_user_message(messages: Sequence[ChatMessage]) -> ChatMessage:
        for message in reversed(messages):
            if message.role == MessageRole.USER:
                return message
        raise ChatValidationError("No user message found")

    def stream_turn(self, messages: Sequence[ChatMessage], origin: Optional[Coordinates] = None) -> AsyncIterator[StreamEvent]:
        """
        Validate the conversation and return the event stream for this turn.
        Validation happens here, before any stream exists, so a bad request
        never opens one.
        """
        user_query = self.last_user_message(messages).content
        return self._run_turn(user_query, origin)

    async def _run_turn(self, user_query: str, origin: Optional[Coordinates]) -> AsyncIterator[StreamEvent]:
        start_time = time.monotonic()
        logs.log(logging.INFO, f"Chat turn started: \"{user_query}\"", extra={"origin": origin.model_dump() if origin else None})

        try:
            intent = await self._extract_intent(user_query)

            logs.log(logging.INFO, f"Searching: \"{intent.formatted_query}\"")
            search = await self.places_service.search(intent.formatted_query, origin=origin)
            if search.error:
                # Nothing meaningful to narrate, report and end the turn
                logs.log(logging.WARNING, f"Search failed, ending turn: {search.error}")
                yield ErrorNotice(error=search.error)
                return

            places = search.results
            logs.log(logging.INFO, f"Found {len(places)} places")
            if places:
                yield PlacesPayload(data=places)

            chunk_count = 0
            async for delta in self._narrate(user_query, places):
                chunk_count += 1
                yield ContentDelta(content=delta)
            logs.log(logging.INFO, f"Streamed {chunk_count} narration chunks")
        except Exception as e:
            logs.log(logging.ERROR, f"Chat turn failed: {str(e)}")
            yield ErrorNotice(error=str(e) or type(e).__name__)

        yield EndOfTurn()
        logs.log(logging.INFO, f"Chat turn finished in {(time.monotonic() - start_time) * 1000:.0f}ms")

    async def _extract_intent(self, user_query: str) -> LocationIntent:
        """Race intent extraction against its deadline; the literal query wins on any failure."""
        try:
            return await asyncio.wait_for(self.llm.extract_location_intent(user_query), timeout=self.intent_timeout)
        except asyncio.TimeoutError:
            logs.log(logging.WARNING, f"Intent extraction exceeded {self.intent_timeout}s, using fallback")
        except Exception as e:
            logs.log(logging.WARNING, f"Intent extraction failed, using fallback: {str(e)}")
        return LocationIntent.fallback(user_query)

    async def _narrate(self, user_query: str, places: Sequence[PlaceRecord]) -> AsyncIterator[str]:
        """
        Forward narration deltas as they arrive. A timer armed before the call
        cancels the narration if it has not completed within narration_timeout;
        timeouts and transport errors end the narration quietly.
        """
        queue: asyncio.Queue = asyncio.Queue()

        async def pump():
            async for delta in self.llm.stream_places_summary(user_query, places):
                queue.put_nowait(delta)

        task = asyncio.create_task(pump())
        task.add_done_callback(lambda _: queue.put_nowait(_STREAM_DONE))
        timer = asyncio.get_running_loop().call_later(self.narration_timeout, task.cancel)

        try:
            while True:
                item = await queue.get()
                if item is _STREAM_DONE:
                    break
                yield item
        finally:
            timer.cancel()
            if not task.done():
                task.cancel()

        await asyncio.wait([task])
        if task.cancelled():
            logs.log(logging.WARNING, f"Narration timed out after {self.narration_timeout}s")
        elif task.exception() is not None:
            logs.log(logging.WARNING, f"Narration failed: {task.exception()}")
