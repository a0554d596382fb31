import asyncio

from mapchat.models.base_model import LocationIntent
from mapchat.models.places_model import PlacesSearchResponse


def maps_payload(status="OK", **fields):
    return {"status": status, **fields}


class FakeLLM:
    def __init__(self, intent=None, deltas=(), extract_hangs=False, narration_hangs_after=None, narration_error=None):
        self.intent = intent
        self.deltas = list(deltas)
        self.extract_hangs = extract_hangs
        self.narration_hangs_after = narration_hangs_after
        self.narration_error = narration_error
        self.narrated = None

    async def extract_location_intent(self, user_query):
        if self.extract_hangs:
            await asyncio.Event().wait()
        return self.intent or LocationIntent.fallback(user_query)

    async def stream_places_summary(self, user_query, places):
        self.narrated = (user_query, list(places))
        for i, delta in enumerate(self.deltas):
            if self.narration_hangs_after == i:
                await asyncio.Event().wait()
            yield delta
        if self.narration_hangs_after == len(self.deltas):
            await asyncio.Event().wait()
        if self.narration_error:
            raise self.narration_error


class FakePlaces:
    def __init__(self, response=None, error=None):
        self.response = response or PlacesSearchResponse(results=[])
        self.error = error
        self.queries = []

    async def search(self, query, origin=None):
        self.queries.append((query, origin))
        if self.error:
            raise self.error
        return self.response
