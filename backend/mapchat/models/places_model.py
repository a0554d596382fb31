from pydantic import BaseModel
from typing import Any, List, Optional

from mapchat.models.base_model import Coordinates

class OpeningHours(BaseModel):
    open_now: Optional[bool] = None
    periods: Optional[List[Any]] = None
    weekday_text: Optional[List[str]] = None

class PhotoReference(BaseModel):
    photo_reference: str
    width: Optional[int] = None
    height: Optional[int] = None

class PlaceRecord(BaseModel):
    """Normalized view of one provider place result"""
    place_id: Optional[str] = None
    name: Optional[str] = None
    formatted_address: Optional[str] = None
    vicinity: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None
    price_level: Optional[int] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    opening_hours: Optional[OpeningHours] = None
    types: List[str] = []
    photos: List[PhotoReference] = []
    permanently_closed: Optional[bool] = None
    # Only set when both the place coordinates and an origin are known
    distance_km: Optional[float] = None
    distance_text: Optional[str] = None

    @property
    def coordinates(self) -> Optional[Coordinates]:
        if self.lat is None or self.lng is None:
            return None
        return Coordinates(lat=self.lat, lng=self.lng)

class Review(BaseModel):
    author_name: Optional[str] = None
    rating: Optional[float] = None
    text: Optional[str] = None
    time: Optional[int] = None
    relative_time_description: Optional[str] = None

class PlaceDetails(PlaceRecord):
    """Place record with the extended details field set"""
    international_phone_number: Optional[str] = None
    google_maps_url: Optional[str] = None
    reviews: List[Review] = []
    business_status: Optional[str] = None
    editorial_summary: Optional[str] = None
    # Service options
    curbside_pickup: Optional[bool] = None
    delivery: Optional[bool] = None
    dine_in: Optional[bool] = None
    reservable: Optional[bool] = None
    takeout: Optional[bool] = None
    # Accessibility
    wheelchair_accessible_entrance: Optional[bool] = None
    # Serves options
    serves_beer: Optional[bool] = None
    serves_breakfast: Optional[bool] = None
    serves_brunch: Optional[bool] = None
    serves_dinner: Optional[bool] = None
    serves_lunch: Optional[bool] = None
    serves_vegetarian_food: Optional[bool] = None
    serves_wine: Optional[bool] = None

class PlacesSearchResponse(BaseModel):
    results: List[PlaceRecord] = []
    search_center: Optional[Coordinates] = None
    error: Optional[str] = None

class PlaceDetailsResponse(BaseModel):
    result: Optional[PlaceDetails] = None
    error: Optional[str] = None

class GeocodeResponse(BaseModel):
    result: Coordinates

class ReverseGeocodeResult(BaseModel):
    address: str
    lat: float
    lng: float

class ReverseGeocodeResponse(BaseModel):
    result: ReverseGeocodeResult

class DistanceResult(BaseModel):
    distance_km: float
    distance_text: str
    distance_meters: int

class DistanceResponse(BaseModel):
    result: DistanceResult

class MapEmbedResponse(BaseModel):
    embedUrl: str
    html: str
    directLink: str
