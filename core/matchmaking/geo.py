import math

from core.matchmaking.models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(origin: GeoPoint, target: GeoPoint) -> float:
    """Great-circle distance between two points in kilometers."""
    lat1 = math.radians(origin.latitude)
    lat2 = math.radians(target.latitude)
    d_lat = lat2 - lat1
    d_lng = math.radians(target.longitude - origin.longitude)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c
