import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from mapchat.core.exceptions import MapsApiError, MapsNotFoundError
from mapchat.core.logger import logs
from mapchat.core.maps_connection import MapsClient, get_maps_client
from mapchat.models.base_model import Coordinates
from mapchat.models.places_model import PlaceDetailsResponse, PlacesSearchResponse
from mapchat.services.Places_service import PlacesService

router = APIRouter(prefix="/places")

MAX_QUERY_LENGTH = 200

def get_places_service(client: MapsClient = Depends(get_maps_client)) -> PlacesService:
    return PlacesService(client)

def optional_origin(lat: Optional[float], lng: Optional[float]) -> Optional[Coordinates]:
    if lat is None or lng is None:
        return None
    try:
        return Coordinates(lat=lat, lng=lng)
    except ValueError:
        raise HTTPException(status_code=422, detail="userLat/userLng are out of range")

@router.get("/search", response_model=PlacesSearchResponse, response_model_exclude_none=True)
async def search_places_endpoint(
    query: str = Query(..., min_length=1, description="What to look for, e.g. 'coffee shop'"),
    location: Optional[str] = Query(None, description="Free-text area to search in"),
    radius: int = Query(5000, gt=0, le=50000, description="Search radius in meters"),
    userLat: Optional[float] = None,
    userLng: Optional[float] = None,
    service: PlacesService = Depends(get_places_service)
):
    sanitized_query = query.strip()[:MAX_QUERY_LENGTH]
    if not sanitized_query:
        raise HTTPException(status_code=400, detail="Query parameter is required")

    try:
        return await service.search(
            sanitized_query,
            location=location,
            radius=radius,
            origin=optional_origin(userLat, userLng)
        )
    except MapsApiError as e:
        logs.log(logging.ERROR, f"Places search error: {e.message}")
        raise HTTPException(status_code=500, detail=f"Failed to search places: {e.message}")

@router.get("/details", response_model=PlaceDetailsResponse, response_model_exclude_none=True)
async def place_details_endpoint(
    placeId: str = Query(..., min_length=1),
    userLat: Optional[float] = None,
    userLng: Optional[float] = None,
    service: PlacesService = Depends(get_places_service)
):
    try:
        return await service.details(placeId, optional_origin(userLat, userLng))
    except MapsNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except MapsApiError as e:
        logs.log(logging.ERROR, f"Place details error: {e.message}")
        raise HTTPException(status_code=500, detail=f"Failed to get place details: {e.message}")
