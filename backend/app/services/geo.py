"""
Geodistance helpers.

Great-circle distance between WGS84 coordinates using the haversine
formula, plus a few helpers built on top of it for proximity queries.
"""

import math
from dataclasses import dataclass
from typing import Optional

# Single canonical Earth radius; every distance in the app is in meters.
EARTH_RADIUS_M = 6_371_000

# Meters per degree of latitude (and of longitude at the equator)
METERS_PER_DEGREE = math.pi * EARTH_RADIUS_M / 180


def haversine_distance_m(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """
    Calculate the great-circle distance between two points in meters.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Non-negative distance in meters. Identical points give exactly 0.0.
    """
    if lat1 == lat2 and lon1 == lon2:
        return 0.0

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push `a` marginally outside [0, 1]
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def format_distance(distance_m: float) -> str:
    """Human readable distance: '850m' below a kilometer, '2.4km' above."""
    if distance_m < 1000:
        return f"{round(distance_m)}m"
    return f"{distance_m / 1000:.1f}km"


@dataclass(frozen=True)
class BoundingBox:
    """
    Lat/lon window enclosing a circle on the sphere.

    `min_lon`/`max_lon` are None when the circle reaches a pole or crosses
    the antimeridian; callers then filter on latitude only.
    """
    min_lat: float
    max_lat: float
    min_lon: Optional[float] = None
    max_lon: Optional[float] = None


def bounding_box(lat: float, lon: float, radius_m: float) -> BoundingBox:
    """
    Compute a box that contains every point within `radius_m` of (lat, lon).

    Used as a coarse storage-side prefilter; exact filtering is done with
    haversine_distance_m afterwards.
    """
    d_lat = radius_m / METERS_PER_DEGREE
    min_lat = lat - d_lat
    max_lat = lat + d_lat

    if min_lat <= -90 or max_lat >= 90:
        return BoundingBox(min_lat=max(min_lat, -90.0), max_lat=min(max_lat, 90.0))

    angular_radius = radius_m / EARTH_RADIUS_M
    ratio = math.sin(angular_radius) / math.cos(math.radians(lat))
    if ratio >= 1:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat)

    d_lon = math.degrees(math.asin(ratio))
    min_lon = lon - d_lon
    max_lon = lon + d_lon

    if min_lon < -180 or max_lon > 180:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat)

    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)
