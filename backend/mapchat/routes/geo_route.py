from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query

from mapchat.core.geo import haversine_km, format_distance
from mapchat.models.places_model import (
    DistanceResponse,
    DistanceResult,
    GeocodeResponse,
    MapEmbedResponse,
    ReverseGeocodeResponse,
    ReverseGeocodeResult,
)
from mapchat.routes.places_route import get_places_service
from mapchat.services.Places_service import PlacesService

router = APIRouter()

@router.get("/geocode", response_model=GeocodeResponse)
async def geocode_endpoint(
    address: str = Query(..., min_length=1),
    service: PlacesService = Depends(get_places_service)
):
    result = await service.geocode(address)
    if result is None:
        raise HTTPException(status_code=404, detail="Address not found")
    return GeocodeResponse(result=result)

@router.get("/reverse-geocode", response_model=ReverseGeocodeResponse)
async def reverse_geocode_endpoint(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    service: PlacesService = Depends(get_places_service)
):
    address = await service.reverse_geocode(lat, lng)
    if address is None:
        raise HTTPException(status_code=404, detail="Address not found for given coordinates")
    return ReverseGeocodeResponse(result=ReverseGeocodeResult(address=address, lat=lat, lng=lng))

@router.get("/distance", response_model=DistanceResponse)
async def distance_endpoint(
    lat1: float = Query(..., ge=-90, le=90),
    lng1: float = Query(..., ge=-180, le=180),
    lat2: float = Query(..., ge=-90, le=90),
    lng2: float = Query(..., ge=-180, le=180),
):
    distance_km = haversine_km(lat1, lng1, lat2, lng2)
    return DistanceResponse(
        result=DistanceResult(
            distance_km=distance_km,
            distance_text=format_distance(distance_km),
            distance_meters=round(distance_km * 1000)
        )
    )

@router.get("/map/embed", response_model=MapEmbedResponse)
async def map_embed_endpoint(placeId: Optional[str] = None, q: Optional[str] = None):
    """Embeddable Google Maps iframe for a place id or a free-text query."""
    if not placeId and not q:
        raise HTTPException(status_code=400, detail="Either placeId or q parameter is required")

    if placeId:
        embed_url = f"https://www.google.com/maps?q=place_id:{quote(placeId)}&output=embed"
        direct_link = f"https://www.google.com/maps/place/?q=place_id:{quote(placeId)}"
    else:
        embed_url = f"https://www.google.com/maps?q={quote(q)}&output=embed"
        direct_link = f"https://www.google.com/maps/search/{quote(q)}"

    return MapEmbedResponse(
        embedUrl=embed_url,
        html=(
            f'<iframe width="600" height="450" style="border:0" allowfullscreen loading="lazy" '
            f'referrerpolicy="no-referrer-when-downgrade" src="{embed_url}"></iframe>'
        ),
        directLink=direct_link
    )
