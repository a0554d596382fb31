import pytest

from mapchat.core.config import Settings
from mapchat.core.exceptions import LLMError
from mapchat.core.llm_connection import LLMService, build_places_digest, parse_location_intent
from mapchat.core.llm_providers import BaseLLMProvider, OllamaProvider, OpenAIProvider
from mapchat.models.base_model import NEAR_ME, LocationIntent
from mapchat.models.places_model import PlaceRecord


class ScriptedProvider(BaseLLMProvider):
    """Provider that replays a fixed reply and records what it was asked."""

    def __init__(self, reply=None, deltas=(), error=None):
        super().__init__("scripted")
        self.reply = reply
        self.deltas = list(deltas)
        self.error = error
        self.calls = []

    async def generate(self, messages, temperature=None, max_tokens=None, json_mode=False, timeout=10.0):
        self.calls.append({"messages": messages, "max_tokens": max_tokens, "json_mode": json_mode, "timeout": timeout})
        if self.error:
            raise self.error
        return self.reply

    async def stream(self, messages, temperature=None, max_tokens=None, timeout=10.0):
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        for delta in self.deltas:
            yield delta

    def get_provider_name(self):
        return "Scripted"


def test_digest_without_places():
    assert build_places_digest([]) == "\n\nNo places found."


def test_digest_lists_places():
    places = [
        PlaceRecord(name="Corner Cafe", rating=4.5, distance_text="850m"),
        PlaceRecord(name="Bean Bar"),
    ]

    assert build_places_digest(places) == (
        "\n\nFound 2 places:\n"
        "1. Corner Cafe - 4.5★ (850m away)\n"
        "2. Bean Bar - N/A★\n"
    )


def test_digest_single_place_and_limit():
    assert build_places_digest([PlaceRecord(name="Solo")]).startswith("\n\nFound 1 place:\n")

    many = [PlaceRecord(name=f"P{i}") for i in range(8)]
    digest = build_places_digest(many, limit=5)
    assert "Found 8 places" in digest
    assert "5. P4" in digest
    assert "6. P5" not in digest


def test_parse_intent_defaults_missing_fields():
    intent = parse_location_intent('{"query": "ramen"}', "ramen please")

    assert intent == LocationIntent(query="ramen", location=NEAR_ME, formatted_query="ramen")


def test_parse_intent_falls_back_to_utterance():
    intent = parse_location_intent('{"location": "  "}', "anything open late")

    assert intent.query == "anything open late"
    assert intent.formatted_query == "anything open late"


@pytest.mark.parametrize("content", ["not json", "[1, 2]", '"just a string"'])
def test_parse_intent_rejects_non_objects(content):
    with pytest.raises(ValueError):
        parse_location_intent(content, "q")


async def test_extract_intent():
    provider = ScriptedProvider(
        reply='{"query": "coffee shop", "location": "Taipei 101", "formatted_query": "coffee shop in Taipei 101"}'
    )
    service = LLMService(provider=provider, config=Settings(INTENT_MAX_TOKENS=42, INTENT_TIMEOUT=1.5))

    intent = await service.extract_location_intent("find a coffee shop near Taipei 101")

    assert intent.formatted_query == "coffee shop in Taipei 101"
    call = provider.calls[0]
    assert call["json_mode"] is True
    assert call["max_tokens"] == 42
    assert call["timeout"] == 1.5
    assert call["messages"][-1] == {"role": "user", "content": "find a coffee shop near Taipei 101"}


async def test_extract_intent_malformed_json_falls_back():
    service = LLMService(provider=ScriptedProvider(reply="Sure! Here is the JSON you asked for"))

    intent = await service.extract_location_intent("best dumplings")

    assert intent == LocationIntent.fallback("best dumplings")


async def test_extract_intent_provider_error_falls_back():
    service = LLMService(provider=ScriptedProvider(error=LLMError("connection refused")))

    intent = await service.extract_location_intent("gas stations nearby")

    assert intent.query == "gas stations nearby"
    assert intent.location == NEAR_ME


async def test_stream_summary_appends_digest():
    provider = ScriptedProvider(deltas=["- Corner", " Cafe"])
    service = LLMService(provider=provider, config=Settings(NARRATION_TEMPERATURE=0.3, NARRATION_MAX_TOKENS=99))

    deltas = [d async for d in service.stream_places_summary("coffee?", [PlaceRecord(name="Corner Cafe")])]

    assert deltas == ["- Corner", " Cafe"]
    call = provider.calls[0]
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 99
    assert call["messages"][-1]["content"] == "coffee?\n\nFound 1 place:\n1. Corner Cafe - N/A★\n"


@pytest.mark.parametrize(
    "name, provider_type",
    [("ollama", OllamaProvider), ("OpenAI", OpenAIProvider), ("mystery", OllamaProvider)],
)
def test_provider_selection(name, provider_type):
    service = LLMService(config=Settings(LLM_PROVIDER=name))

    assert isinstance(service.provider, provider_type)
