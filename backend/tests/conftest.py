import httpx
import pytest

from mapchat.core.maps_connection import MapsClient


@pytest.fixture
def maps_requests():
    """Requests seen by the fake Maps API, newest last."""
    return []


@pytest.fixture
def make_maps_client(maps_requests):
    """Build a MapsClient whose HTTP calls are answered by `handler(request) -> httpx.Response`."""

    def factory(handler):
        def record(request: httpx.Request) -> httpx.Response:
            maps_requests.append(request)
            return handler(request)

        return MapsClient(api_key="test-key", transport=httpx.MockTransport(record))

    return factory


@pytest.fixture
def json_maps_client(make_maps_client):
    """MapsClient that answers every call with the same JSON payload."""

    def factory(payload, status_code=200):
        return make_maps_client(lambda request: httpx.Response(status_code, json=payload))

    return factory
