from pydantic import BaseModel
from typing import Optional
from enum import Enum

class TravelMode(str, Enum):
    DRIVING = "driving"
    WALKING = "walking"
    BICYCLING = "bicycling"
    TRANSIT = "transit"

class DirectionsResult(BaseModel):
    """Distance and duration of the first leg of the best route"""
    distance_text: str
    duration_text: str

class DirectionsResponse(BaseModel):
    result: Optional[DirectionsResult] = None
    error: Optional[str] = None
