import logging

from mapchat.core.exceptions import MapsAuthError, MapsNotFoundError
from mapchat.core.logger import logs
from mapchat.core.maps_connection import MapsClient
from mapchat.models.directions_model import DirectionsResponse, DirectionsResult, TravelMode

class DirectionsService:
    def __init__(self, client: MapsClient):
        self.client = client

    async def get_directions(self, origin: str, destination: str, mode: TravelMode = TravelMode.DRIVING) -> DirectionsResponse:
        """
        Best route between two addresses or "lat,lng" strings.
        Only the first leg of the first route is reported.
        """
        try:
            data = await self.client.directions(origin, destination, TravelMode(mode).value)
        except MapsAuthError as e:
            logs.log(logging.WARNING, f"Directions rejected: {e.message}")
            return DirectionsResponse(result=None, error="API key issue")
        except MapsNotFoundError:
            # origin or destination could not be geocoded
            return DirectionsResponse(result=None, error="No directions found")

        routes = data.get("routes") or []
        legs = (routes[0].get("legs") or []) if routes else []
        if not legs:
            logs.log(logging.INFO, f"No route from '{origin}' to '{destination}' ({mode})")
            return DirectionsResponse(result=None, error="No directions found")

        leg = legs[0]
        distance_text = (leg.get("distance") or {}).get("text")
        duration_text = (leg.get("duration") or {}).get("text")
        if not distance_text or not duration_text:
            logs.log(logging.WARNING, f"Route leg without distance or duration from '{origin}' to '{destination}'")
            return DirectionsResponse(result=None, error="No directions found")

        return DirectionsResponse(
            result=DirectionsResult(distance_text=distance_text, duration_text=duration_text)
        )
