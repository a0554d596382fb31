import json

import httpx
import pytest
from fastapi.testclient import TestClient

from mapchat.core.maps_connection import MapsClient, get_maps_client
from mapchat.main import app
from mapchat.models.places_model import PlaceRecord, PlacesSearchResponse
from mapchat.routes.base_chat import get_agent
from mapchat.services.Chat_service import ChatAgent

from fakes import FakeLLM, FakePlaces


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def fake_maps(client):
    """Route every Maps call to a fixed JSON payload."""

    def install(payload):
        maps = MapsClient(api_key="test-key", transport=httpx.MockTransport(lambda r: httpx.Response(200, json=payload)))
        app.dependency_overrides[get_maps_client] = lambda: maps

    return install


def sse_payloads(body: str):
    frames = [line[len("data: "):] for line in body.split("\n\n") if line.startswith("data: ")]
    assert frames[-1] == "[DONE]"
    return [json.loads(frame) for frame in frames[:-1]]


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert "google_maps_configured" in body
    assert "llm_provider" in body


def test_chat_streams_turn(client):
    places = PlacesSearchResponse(results=[PlaceRecord(place_id="p1", name="Corner Cafe", lat=1, lng=2)])
    app.dependency_overrides[get_agent] = lambda: ChatAgent(FakeLLM(deltas=["Try ", "Corner Cafe."]), FakePlaces(places))

    response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "coffee"}]})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    payloads = sse_payloads(response.text)
    assert payloads[0]["type"] == "places"
    assert payloads[0]["data"][0]["name"] == "Corner Cafe"
    assert payloads[1:] == [{"content": "Try "}, {"content": "Corner Cafe."}, {"content": ""}]


def test_chat_search_error_frames(client):
    places = PlacesSearchResponse(results=[], error="Google Maps API key issue - check enabled APIs")
    app.dependency_overrides[get_agent] = lambda: ChatAgent(FakeLLM(), FakePlaces(places))

    response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "coffee"}]})

    assert sse_payloads(response.text) == [{"error": "Google Maps API key issue - check enabled APIs"}]


def test_chat_without_user_message_is_400(client):
    app.dependency_overrides[get_agent] = lambda: ChatAgent(FakeLLM(), FakePlaces())

    response = client.post("/api/chat", json={"messages": [{"role": "assistant", "content": "hello"}]})

    assert response.status_code == 400
    assert response.json()["detail"] == "No user message found"


def test_chat_rejects_bad_location(client):
    response = client.post("/api/chat", json={
        "messages": [{"role": "user", "content": "coffee"}],
        "userLocation": {"lat": 120, "lng": 0},
    })

    assert response.status_code == 422


def test_places_search(client, fake_maps):
    fake_maps({"status": "OK", "results": [{"place_id": "p1", "name": "Cafe", "geometry": {"location": {"lat": 1, "lng": 2}}}]})

    response = client.get("/api/places/search", params={"query": "cafe", "userLat": 1, "userLng": 2})

    assert response.status_code == 200
    place = response.json()["results"][0]
    assert place["distance_text"] == "0m"
    assert response.json()["search_center"] == {"lat": 1, "lng": 2}


def test_places_search_requires_query(client):
    assert client.get("/api/places/search").status_code == 422


def test_places_search_provider_failure_is_500(client, fake_maps):
    fake_maps({"status": "OVER_QUERY_LIMIT"})

    response = client.get("/api/places/search", params={"query": "cafe"})

    assert response.status_code == 500


def test_place_details_not_found(client, fake_maps):
    fake_maps({"status": "NOT_FOUND"})

    response = client.get("/api/places/details", params={"placeId": "missing"})

    assert response.status_code == 404
    assert response.json()["detail"] == "Place not found"


def test_geocode_not_found(client, fake_maps):
    fake_maps({"status": "ZERO_RESULTS", "results": []})

    response = client.get("/api/geocode", params={"address": "nowhere"})

    assert response.status_code == 404


def test_reverse_geocode(client, fake_maps):
    fake_maps({"status": "OK", "results": [{"formatted_address": "1 Main St"}]})

    response = client.get("/api/reverse-geocode", params={"lat": 1, "lng": 2})

    assert response.json() == {"result": {"address": "1 Main St", "lat": 1, "lng": 2}}


def test_distance(client):
    response = client.get("/api/distance", params={"lat1": 1, "lng1": 2, "lat2": 1, "lng2": 2})

    assert response.json()["result"] == {"distance_km": 0, "distance_text": "0m", "distance_meters": 0}


def test_distance_validates_range(client):
    response = client.get("/api/distance", params={"lat1": 91, "lng1": 0, "lat2": 0, "lng2": 0})

    assert response.status_code == 422


def test_directions(client, fake_maps):
    fake_maps({"status": "OK", "routes": [{"legs": [{"distance": {"text": "3 km"}, "duration": {"text": "9 mins"}}]}]})

    response = client.get("/api/directions", params={"origin": "A", "destination": "B", "mode": "bicycling"})

    assert response.json() == {"result": {"distance_text": "3 km", "duration_text": "9 mins"}}


def test_directions_invalid_mode(client):
    response = client.get("/api/directions", params={"origin": "A", "destination": "B", "mode": "teleport"})

    assert response.status_code == 422


def test_map_embed_for_place(client):
    body = client.get("/api/map/embed", params={"placeId": "abc"}).json()

    assert body["embedUrl"] == "https://www.google.com/maps?q=place_id:abc&output=embed"
    assert body["directLink"] == "https://www.google.com/maps/place/?q=place_id:abc"
    assert body["embedUrl"] in body["html"]


def test_map_embed_for_query(client):
    body = client.get("/api/map/embed", params={"q": "Taipei 101"}).json()

    assert body["directLink"] == "https://www.google.com/maps/search/Taipei%20101"


def test_map_embed_requires_target(client):
    assert client.get("/api/map/embed").status_code == 400
