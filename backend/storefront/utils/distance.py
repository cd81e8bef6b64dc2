"""
Distance helpers for delivery fee calculation
"""
import math

EARTH_RADIUS_KM = 6371

# Straight-line distance underestimates city routes; roads run ~30% longer
ROUTE_CORRECTION_FACTOR = 1.3


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Approximate road distance in km between two coordinates.

    Haversine great-circle distance scaled by ROUTE_CORRECTION_FACTOR,
    rounded to one decimal.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    distance = EARTH_RADIUS_KM * c
    return round(distance * ROUTE_CORRECTION_FACTOR, 1)
