import logging
from typing import Optional, Union

from mapchat.core.exceptions import MapsApiError, MapsAuthError, MapsNotFoundError
from mapchat.core.geo import calculate_distance, format_distance
from mapchat.core.logger import logs
from mapchat.core.maps_connection import MapsClient
from mapchat.models.base_model import Coordinates
from mapchat.models.places_model import (
    OpeningHours,
    PhotoReference,
    PlaceDetails,
    PlaceDetailsResponse,
    PlaceRecord,
    PlacesSearchResponse,
    Review,
)

MAX_SEARCH_RESULTS = 20
MAX_SEARCH_PHOTOS = 3
MAX_DETAILS_PHOTOS = 10
SEARCH_KEY_ERROR = "Google Maps API key issue - check enabled APIs"
DETAILS_KEY_ERROR = "API key issue"

DETAILS_FIELDS = [
    "place_id",
    "name",
    "formatted_address",
    "formatted_phone_number",
    "international_phone_number",
    "website",
    "url",
    "rating",
    "user_ratings_total",
    "price_level",
    "opening_hours",
    "geometry",
    "types",
    "photos",
    "reviews",
    "adr_address",
    "business_status",
    "curbside_pickup",
    "delivery",
    "dine_in",
    "editorial_summary",
    "reservable",
    "serves_beer",
    "serves_breakfast",
    "serves_brunch",
    "serves_dinner",
    "serves_lunch",
    "serves_vegetarian_food",
    "serves_wine",
    "takeout",
    "wheelchair_accessible_entrance",
]

SERVICE_FLAGS = [
    "curbside_pickup",
    "delivery",
    "dine_in",
    "reservable",
    "takeout",
    "wheelchair_accessible_entrance",
    "serves_beer",
    "serves_breakfast",
    "serves_brunch",
    "serves_dinner",
    "serves_lunch",
    "serves_vegetarian_food",
    "serves_wine",
]


class PlacesService:
    def __init__(self, client: MapsClient):
        self.client = client

    async def search(
        self,
        query: str,
        location: Union[Coordinates, str, None] = None,
        radius: int = 5000,
        origin: Optional[Coordinates] = None,
        language: str = "en",
    ) -> PlacesSearchResponse:
        """
        Text search for places.
        Coordinates bias the search around that point within `radius` meters,
        a free-text location is folded into the query ("<query> in <location>").
        A rejected API key degrades to an empty result with an error message.
        """
        search_query = query
        bias = None
        search_radius = None

        if isinstance(location, Coordinates):
            bias = f"{location.lat},{location.lng}"
            search_radius = radius
        elif location:
            search_query = f"{query} in {location}"

        try:
            data = await self.client.text_search(search_query, location=bias, radius=search_radius, language=language)
        except MapsAuthError as e:
            logs.log(logging.WARNING, f"Places search rejected: {e.message}")
            return PlacesSearchResponse(results=[], search_center=origin, error=SEARCH_KEY_ERROR)

        raw_results = data.get("results") or []
        results = [
            self._to_record(place, origin)
            for place in raw_results[:MAX_SEARCH_RESULTS]
        ]
        logs.log(logging.INFO, f"Places search '{search_query}' returned {len(results)} results")

        return PlacesSearchResponse(results=results, search_center=origin)

    async def details(self, place_id: str, origin: Optional[Coordinates] = None) -> PlaceDetailsResponse:
        """Fetch the extended field set for one place. Raises MapsNotFoundError for unknown ids."""
        try:
            data = await self.client.place_details(place_id, DETAILS_FIELDS)
        except MapsNotFoundError as e:
            raise MapsNotFoundError("Place not found") from e
        except MapsAuthError as e:
            logs.log(logging.WARNING, f"Place details rejected: {e.message}")
            return PlaceDetailsResponse(result=None, error=DETAILS_KEY_ERROR)

        place = data.get("result")
        if not place:
            raise MapsNotFoundError("Place not found")

        lat, lng = self._coords(place)
        distance_km, distance_text = self._distance(lat, lng, origin)
        editorial = place.get("editorial_summary") or {}

        details = PlaceDetails(
            place_id=place.get("place_id") or place_id,
            name=place.get("name"),
            formatted_address=place.get("formatted_address"),
            phone=place.get("formatted_phone_number"),
            international_phone_number=place.get("international_phone_number"),
            website=place.get("website"),
            google_maps_url=place.get("url"),
            rating=place.get("rating"),
            user_ratings_total=place.get("user_ratings_total"),
            price_level=place.get("price_level"),
            opening_hours=self._opening_hours(place),
            lat=lat,
            lng=lng,
            types=place.get("types") or [],
            photos=self._photos(place, MAX_DETAILS_PHOTOS),
            reviews=[Review(**{k: review.get(k) for k in Review.model_fields}) for review in place.get("reviews") or []],
            business_status=place.get("business_status"),
            permanently_closed=place.get("permanently_closed"),
            editorial_summary=editorial.get("overview"),
            distance_km=distance_km,
            distance_text=distance_text,
            **{flag: place.get(flag) for flag in SERVICE_FLAGS},
        )
        return PlaceDetailsResponse(result=details)

    async def geocode(self, address: str) -> Optional[Coordinates]:
        """Address to coordinates. Advisory: provider errors are logged and give None."""
        try:
            data = await self.client.geocode(address)
        except MapsApiError as e:
            logs.log(logging.ERROR, f"Geocoding error: {e.message}")
            return None

        results = data.get("results") or []
        if not results:
            return None
        lat, lng = self._coords(results[0])
        if lat is None or lng is None:
            logs.log(logging.WARNING, f"Geocoding result without a location for '{address}'")
            return None
        return Coordinates(lat=lat, lng=lng)

    async def reverse_geocode(self, lat: float, lng: float) -> Optional[str]:
        """Coordinates to a formatted address. Advisory: provider errors are logged and give None."""
        try:
            data = await self.client.reverse_geocode(lat, lng)
        except MapsApiError as e:
            logs.log(logging.ERROR, f"Reverse geocoding error: {e.message}")
            return None

        results = data.get("results") or []
        if not results:
            return None
        return results[0].get("formatted_address")

    def _to_record(self, place: dict, origin: Optional[Coordinates]) -> PlaceRecord:
        lat, lng = self._coords(place)
        distance_km, distance_text = self._distance(lat, lng, origin)

        return PlaceRecord(
            place_id=place.get("place_id"),
            name=place.get("name"),
            formatted_address=place.get("formatted_address"),
            vicinity=place.get("vicinity"),
            lat=lat,
            lng=lng,
            rating=place.get("rating"),
            user_ratings_total=place.get("user_ratings_total"),
            price_level=place.get("price_level"),
            phone=place.get("international_phone_number"),
            website=place.get("website"),
            opening_hours=self._opening_hours(place),
            types=place.get("types") or [],
            photos=self._photos(place, MAX_SEARCH_PHOTOS),
            permanently_closed=place.get("permanently_closed"),
            distance_km=distance_km,
            distance_text=distance_text,
        )

    def _coords(self, place: dict) -> tuple[Optional[float], Optional[float]]:
        location = (place.get("geometry") or {}).get("location") or {}
        return location.get("lat"), location.get("lng")

    def _distance(
        self, lat: Optional[float], lng: Optional[float], origin: Optional[Coordinates]
    ) -> tuple[Optional[float], Optional[str]]:
        if origin is None or lat is None or lng is None:
            return None, None
        distance = calculate_distance(origin, Coordinates(lat=lat, lng=lng))
        return distance, format_distance(distance)

    def _opening_hours(self, place: dict) -> Optional[OpeningHours]:
        hours = place.get("opening_hours")
        if not hours:
            return None
        return OpeningHours(
            open_now=hours.get("open_now"),
            periods=hours.get("periods"),
            weekday_text=hours.get("weekday_text"),
        )

    def _photos(self, place: dict, limit: int) -> list[PhotoReference]:
        return [
            PhotoReference(
                photo_reference=photo["photo_reference"],
                width=photo.get("width"),
                height=photo.get("height"),
            )
            for photo in (place.get("photos") or [])[:limit]
            if photo.get("photo_reference")
        ]
