"""Great-circle distance helpers."""
import math

EARTH_RADIUS_KM = 6371.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Distance in kilometers between two lat/lng pairs (haversine formula)."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def calculate_distance(origin, target) -> float:
    """Distance in kilometers between two objects exposing ``lat`` and ``lng``."""
    return haversine_km(origin.lat, origin.lng, target.lat, target.lng)


def format_distance(distance_km: float) -> str:
    """
    Format a distance for display.
    Under 1 km -> whole meters ("850m"), under 10 km -> one decimal ("2.4km"),
    otherwise whole kilometers ("12km").
    """
    if distance_km < 1:
        return f"{_round_half_up(distance_km * 1000)}m"
    if distance_km < 10:
        return f"{distance_km:.1f}km"
    return f"{_round_half_up(distance_km)}km"
