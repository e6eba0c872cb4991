"""
Great-circle distance helpers

All coordinates are (lat, lon) in degrees, distances in kilometres.
"""

import math
from typing import Sequence

EARTH_RADIUS_KM = 6371.0


def haversine(a: Sequence[float], b: Sequence[float]) -> float:
    """Great-circle distance between two (lat, lon) points in km"""
    lat1 = math.radians(a[0])
    lon1 = math.radians(a[1])
    lat2 = math.radians(b[0])
    lon2 = math.radians(b[1])
    
    dlat_half = (lat2 - lat1) * 0.5
    dlon_half = (lon2 - lon1) * 0.5
    
    h = math.sqrt(
        math.sin(dlat_half) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon_half) ** 2
    )
    # Rounding can push h past 1.0 for antipodal points
    h = min(1.0, max(0.0, h))
    
    return 2.0 * math.asin(h) * EARTH_RADIUS_KM


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def haversine_to_box(
    point: Sequence[float],
    min_corner: Sequence[float],
    max_corner: Sequence[float]
) -> float:
    """
    Smallest great-circle distance from a point to a lat/lon box
    
    Args:
        point: (lat, lon) query point
        min_corner: (min_lat, min_lon) of the box
        max_corner: (max_lat, max_lon) of the box
    
    Returns:
        Distance in km, 0.0 if the point lies inside the box
    """
    lat, lon = point[0], point[1]
    min_lat, min_lon = min_corner[0], min_corner[1]
    max_lat, max_lon = max_corner[0], max_corner[1]
    
    if min_lon <= lon <= max_lon:
        # Closest point shares the query meridian
        return haversine(point, (_clamp(lat, min_lat, max_lat), lon))
    
    # Outside the longitude span the closest point lies on one of the two
    # bounding meridians. Along a meridian the distance has a single minimum
    # at the foot of the perpendicular, so checking the clamped foot and
    # both ends of the edge is exact.
    phi = math.radians(lat)
    best = math.inf
    for edge_lon in (min_lon, max_lon):
        dlon = math.radians(lon - edge_lon)
        foot = math.degrees(math.atan2(math.sin(phi), math.cos(phi) * math.cos(dlon)))
        for edge_lat in (_clamp(foot, min_lat, max_lat), min_lat, max_lat):
            best = min(best, haversine(point, (edge_lat, edge_lon)))
    
    return best
