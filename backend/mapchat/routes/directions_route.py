import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from mapchat.core.exceptions import MapsApiError
from mapchat.core.logger import logs
from mapchat.core.maps_connection import MapsClient, get_maps_client
from mapchat.models.directions_model import DirectionsResponse, TravelMode
from mapchat.services.Directions_service import DirectionsService

router = APIRouter()

MAX_ENDPOINT_LENGTH = 500

# --- Dependency Injection ---
def get_directions_service(client: MapsClient = Depends(get_maps_client)) -> DirectionsService:
    return DirectionsService(client)

@router.get("/directions", response_model=DirectionsResponse, response_model_exclude_none=True)
async def directions_endpoint(
    origin: str = Query(..., min_length=1),
    destination: str = Query(..., min_length=1),
    mode: TravelMode = TravelMode.DRIVING,
    service: DirectionsService = Depends(get_directions_service)
):
    try:
        return await service.get_directions(
            origin.strip()[:MAX_ENDPOINT_LENGTH],
            destination.strip()[:MAX_ENDPOINT_LENGTH],
            mode
        )
    except MapsApiError as e:
        logs.log(logging.ERROR, f"Directions error: {e.message}")
        raise HTTPException(status_code=500, detail=f"Failed to get directions: {e.message}")
