"""
Spherical geometry helpers.

All distances are in nautical miles on a sphere of radius 3440.1 NM so
that groundspeed in knots converts directly into elapsed time.
"""

import math
from typing import Tuple

EARTH_RADIUS_NM = 3440.1


def haversine_nm(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points in nautical miles.

    Uses the Haversine formula for accuracy over short to medium distances.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_NM * c


def initial_bearing(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """Initial great-circle bearing from point 1 to point 2, in degrees [0, 360)."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lon = math.radians(lon2 - lon1)

    y = math.sin(delta_lon) * math.cos(lat2_rad)
    x = (
        math.cos(lat1_rad) * math.sin(lat2_rad) -
        math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(delta_lon)
    )
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def heading_difference(a: float, b: float) -> float:
    """Smallest angle between two headings, in degrees [0, 180]."""
    diff = abs(a - b) % 360
    return 360 - diff if diff > 180 else diff


def destination_point(
    lat: float, lon: float,
    bearing: float, distance_nm: float
) -> Tuple[float, float]:
    """
    Point reached travelling distance_nm along an initial bearing.

    Standard spherical direct formula; returns (lat, lon) with longitude
    normalized to [-180, 180).
    """
    angular = distance_nm / EARTH_RADIUS_NM
    bearing_rad = math.radians(bearing)
    lat1 = math.radians(lat)
    lon1 = math.radians(lon)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular) +
        math.cos(lat1) * math.sin(angular) * math.cos(bearing_rad)
    )
    lon2 = lon1 + math.atan2(
        math.sin(bearing_rad) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2)
    )

    lon_deg = (math.degrees(lon2) + 540) % 360 - 180
    return (math.degrees(lat2), lon_deg)


def planar_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """Straight-line distance in degree space. Only meaningful for ranking nearby points."""
    return math.hypot(lat2 - lat1, lon2 - lon1)
