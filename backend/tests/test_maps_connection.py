import httpx
import pytest

from mapchat.core.exceptions import MapsApiError, MapsAuthError, MapsNotFoundError
from mapchat.core.maps_connection import MapsClient

from fakes import maps_payload


async def test_text_search_sends_key_and_bias(json_maps_client, maps_requests):
    client = json_maps_client(maps_payload(results=[]))

    await client.text_search("coffee", location="25.0,121.5", radius=1500)

    request = maps_requests[-1]
    assert request.url.path == "/maps/api/place/textsearch/json"
    assert request.url.params["key"] == "test-key"
    assert request.url.params["query"] == "coffee"
    assert request.url.params["location"] == "25.0,121.5"
    assert request.url.params["radius"] == "1500"


async def test_unset_params_are_not_sent(json_maps_client, maps_requests):
    client = json_maps_client(maps_payload(results=[]))

    await client.text_search("coffee in Taipei")

    assert "location" not in maps_requests[-1].url.params
    assert "radius" not in maps_requests[-1].url.params


async def test_details_joins_fields(json_maps_client, maps_requests):
    client = json_maps_client(maps_payload(result={"place_id": "abc"}))

    await client.place_details("abc", ["name", "rating"])

    assert maps_requests[-1].url.params["fields"] == "name,rating"


async def test_reverse_geocode_formats_latlng(json_maps_client, maps_requests):
    client = json_maps_client(maps_payload(results=[]))

    await client.reverse_geocode(1.5, -2.25)

    assert maps_requests[-1].url.params["latlng"] == "1.5,-2.25"


async def test_zero_results_is_not_an_error(json_maps_client):
    client = json_maps_client(maps_payload("ZERO_RESULTS", results=[]))

    data = await client.geocode("nowhere")

    assert data["results"] == []


@pytest.mark.parametrize(
    "status, error_type, status_code",
    [
        ("REQUEST_DENIED", MapsAuthError, 403),
        ("NOT_FOUND", MapsNotFoundError, 404),
        ("INVALID_REQUEST", MapsApiError, 400),
        ("OVER_QUERY_LIMIT", MapsApiError, 429),
        ("UNKNOWN_ERROR", MapsApiError, 500),
        ("SOMETHING_NEW", MapsApiError, 500),
    ],
)
async def test_payload_status_is_translated(json_maps_client, status, error_type, status_code):
    client = json_maps_client(maps_payload(status, error_message="provider says no"))

    with pytest.raises(error_type) as excinfo:
        await client.geocode("anywhere")

    assert excinfo.value.status_code == status_code
    assert excinfo.value.message == "provider says no"


async def test_http_403_is_auth_error(json_maps_client):
    client = json_maps_client({}, status_code=403)

    with pytest.raises(MapsAuthError):
        await client.text_search("coffee")


async def test_invalid_json_is_api_error(make_maps_client):
    client = make_maps_client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))

    with pytest.raises(MapsApiError) as excinfo:
        await client.geocode("anywhere")

    assert excinfo.value.status_code == 502


async def test_transport_failure_is_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = MapsClient(api_key="k", transport=httpx.MockTransport(handler))

    with pytest.raises(MapsApiError):
        await client.directions("a", "b", "driving")
