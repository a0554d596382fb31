import json
import logging
from typing import AsyncIterator, Optional, Sequence

from mapchat.core.config import Settings, settings
from mapchat.core.logger import logs
from mapchat.core.llm_providers import BaseLLMProvider, OllamaProvider, OpenAIProvider
from mapchat.models.base_model import NEAR_ME, LocationIntent
from mapchat.models.places_model import PlaceRecord

EXTRACTION_PROMPT = """Extract location search information from user queries. Return ONLY a valid JSON object with these exact fields:

{
  "query": "what the user is looking for (e.g., 'coffee shop', 'restaurant', 'hospital')",
  "location": "where to search (e.g., 'Taipei 101', 'downtown', 'near me')",
  "formatted_query": "query + ' in ' + location for Google Places API (or just query if location is 'near me')"
}

Examples:
User: "find a coffee shop near Taipei 101"
Response: {"query": "coffee shop", "location": "Taipei 101", "formatted_query": "coffee shop in Taipei 101"}

User: "good beef noodles around here"
Response: {"query": "beef noodles", "location": "near me", "formatted_query": "beef noodles"}

User: "gas stations nearby"
Response: {"query": "gas station", "location": "near me", "formatted_query": "gas station"}

User: "restaurants in San Francisco"
Response: {"query": "restaurant", "location": "San Francisco", "formatted_query": "restaurant in San Francisco"}

Return ONLY the JSON object, no other text."""

CHAT_PROMPT = (
    "You are a helpful assistant for finding places. "
    "Format your response as a markdown list with bullet points. "
    "Keep responses brief and helpful."
)


def build_places_digest(places: Sequence[PlaceRecord], limit: int = 5) -> str:
    """Short text summary of the search results appended to the user's question."""
    if not places:
        return "\n\nNo places found."

    digest = f"\n\nFound {len(places)} place{'s' if len(places) > 1 else ''}:\n"
    for i, place in enumerate(places[:limit], start=1):
        rating = place.rating if place.rating else "N/A"
        distance = f" ({place.distance_text} away)" if place.distance_text else ""
        digest += f"{i}. {place.name} - {rating}★{distance}\n"
    return digest


def parse_location_intent(content: str, user_query: str) -> LocationIntent:
    """
    Parse the extractor's JSON reply. Missing fields fall back to the raw query.
    Raises ValueError when the reply is not a JSON object.
    """
    extracted = json.loads(content)
    if not isinstance(extracted, dict):
        raise ValueError("Expected a JSON object")

    def text(key: str) -> Optional[str]:
        value = extracted.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    query = text("query") or user_query
    return LocationIntent(
        query=query,
        location=text("location") or NEAR_ME,
        formatted_query=text("formatted_query") or query,
    )


class LLMService:
    def __init__(self, provider: Optional[BaseLLMProvider] = None, config: Settings = settings):
        self.config = config
        self.provider = provider or self._initialize_provider()
        logs.log(logging.INFO, f"LLM Provider initialized: {self.provider.get_provider_name()} ({self.provider.model})")

    def _initialize_provider(self) -> BaseLLMProvider:
        """Initialize the selected LLM provider based on settings"""
        provider = self.config.LLM_PROVIDER.lower()

        if provider == "ollama":
            return OllamaProvider(
                base_url=self.config.OLLAMA_BASE_URL,
                model=self.config.OLLAMA_MODEL
            )
        elif provider == "openai":
            return OpenAIProvider(
                base_url=self.config.OPENAI_BASE_URL,
                api_key=self.config.OPENAI_API_KEY,
                model=self.config.OPENAI_MODEL
            )
        else:
            logs.log(logging.WARNING, f"Unknown provider '{provider}', defaulting to Ollama")
            return OllamaProvider(
                base_url=self.config.OLLAMA_BASE_URL,
                model=self.config.OLLAMA_MODEL
            )

    async def extract_location_intent(self, user_query: str) -> LocationIntent:
        """
        Turn the user's utterance into search parameters using JSON output mode.
        Never raises: any LLM or parsing failure degrades to a literal search
        for the whole utterance.
        """
        messages = [
            {"role": "system", "content": EXTRACTION_PROMPT},
            {"role": "user", "content": user_query}
        ]

        try:
            content = await self.provider.generate(
                messages,
                max_tokens=self.config.INTENT_MAX_TOKENS,
                json_mode=True,
                timeout=self.config.INTENT_TIMEOUT,
            )
            intent = parse_location_intent(content, user_query)
        except Exception as e:
            logs.log(logging.WARNING, f"Extraction error, using literal query: {str(e)}")
            return LocationIntent.fallback(user_query)

        logs.log(logging.INFO, "Extracted location intent", extra=intent.model_dump())
        return intent

    async def stream_places_summary(self, user_query: str, places: Sequence[PlaceRecord]) -> AsyncIterator[str]:
        """Stream a short narration of the search results, one content delta at a time."""
        digest = build_places_digest(places, limit=self.config.NARRATION_PLACES_LIMIT)
        messages = [
            {"role": "system", "content": CHAT_PROMPT},
            {"role": "user", "content": user_query + digest}
        ]

        async for delta in self.provider.stream(
            messages,
            temperature=self.config.NARRATION_TEMPERATURE,
            max_tokens=self.config.NARRATION_MAX_TOKENS,
            timeout=self.config.NARRATION_TIMEOUT,
        ):
            yield delta


def get_llm_service() -> LLMService:
    return llm_client

# Singleton instance
llm_client = LLMService()
