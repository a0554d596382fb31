import httpx
import logging
from typing import Any

from mapchat.core.config import settings
from mapchat.core.exceptions import MapsApiError, MapsAuthError, MapsNotFoundError
from mapchat.core.logger import logs

# Google web services report failures in the payload "status" field,
# usually with HTTP 200. Translate them to the equivalent HTTP code.
STATUS_CODES = {
    "OK": 200,
    "ZERO_RESULTS": 200,
    "INVALID_REQUEST": 400,
    "REQUEST_DENIED": 403,
    "NOT_FOUND": 404,
    "OVER_QUERY_LIMIT": 429,
    "OVER_DAILY_LIMIT": 429,
    "MAX_ROUTE_LENGTH_EXCEEDED": 400,
    "MAX_WAYPOINTS_EXCEEDED": 400,
    "UNKNOWN_ERROR": 500,
}

def raise_for_status_code(status_code: int, message: str) -> None:
    if status_code < 400:
        return
    if status_code == 403:
        raise MapsAuthError(message)
    if status_code == 404:
        raise MapsNotFoundError(message)
    raise MapsApiError(message, status_code=status_code)


class MapsClient:
    """
    Thin async client for the Google Maps JSON web services.
    Every call returns the decoded payload or raises a MapsApiError subclass.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://maps.googleapis.com/maps/api",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _get(self, endpoint: str, params: dict) -> dict[str, Any]:
        query = {k: v for k, v in params.items() if v is not None}
        query["key"] = self.api_key

        async with httpx.AsyncClient(transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/{endpoint}/json",
                    params=query,
                    timeout=self.timeout
                )
            except httpx.HTTPError as e:
                logs.log(logging.ERROR, f"Maps transport error on {endpoint}: {str(e)}")
                raise MapsApiError(f"Maps request failed: {str(e)}") from e

        raise_for_status_code(response.status_code, f"Maps API HTTP {response.status_code} on {endpoint}")

        try:
            data = response.json()
        except ValueError as e:
            raise MapsApiError(f"Maps API returned invalid JSON on {endpoint}", status_code=502) from e

        status = data.get("status", "OK")
        message = data.get("error_message") or f"Maps API status {status} on {endpoint}"
        raise_for_status_code(STATUS_CODES.get(status, 500), message)
        return data

    async def text_search(self, query: str, location: str | None = None, radius: int | None = None,
                          language: str = "en") -> dict[str, Any]:
        return await self._get("place/textsearch", {
            "query": query,
            "location": location,
            "radius": radius,
            "language": language,
        })

    async def place_details(self, place_id: str, fields: list[str]) -> dict[str, Any]:
        return await self._get("place/details", {
            "place_id": place_id,
            "fields": ",".join(fields),
        })

    async def geocode(self, address: str) -> dict[str, Any]:
        return await self._get("geocode", {"address": address})

    async def reverse_geocode(self, lat: float, lng: float) -> dict[str, Any]:
        return await self._get("geocode", {"latlng": f"{lat},{lng}"})

    async def directions(self, origin: str, destination: str, mode: str) -> dict[str, Any]:
        return await self._get("directions", {
            "origin": origin,
            "destination": destination,
            "mode": mode,
        })


def get_maps_client() -> MapsClient:
    return MapsClient(
        api_key=settings.GOOGLE_MAPS_API_KEY,
        base_url=settings.MAPS_BASE_URL,
        timeout=settings.MAPS_TIMEOUT
    )
