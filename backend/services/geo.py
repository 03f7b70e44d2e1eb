"""
Geodesic helpers for recorded routes: haversine distance, route length and
point thinning.
"""
import math
from typing import List, Sequence

from domain.models import RoutePoint

EARTH_RADIUS_M = 6371000.0
METERS_PER_MILE = 1609.344
DEFAULT_MIN_SPACING_M = 3.0


def haversine_meters(a: RoutePoint, b: RoutePoint) -> float:
    """Compute distance in meters between two lat/lng points."""
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    )
    # clamp for float drift on antipodal points
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, h)))


def route_distance_meters(points: Sequence[RoutePoint]) -> float:
    """Sum of consecutive legs; zero for fewer than two points."""
    if len(points) < 2:
        return 0.0
    return sum(haversine_meters(points[i - 1], points[i]) for i in range(1, len(points)))


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE


def thin_points(points: Sequence[RoutePoint], min_meters: float = DEFAULT_MIN_SPACING_M) -> List[RoutePoint]:
    """
    Drop samples closer than min_meters to the last kept point.

    The first point is always kept and the last input point is always
    preserved, so the thinned route still ends where the walk ended.
    """
    if len(points) <= 2:
        return list(points)
    out = [points[0]]
    last = points[0]
    for p in points[1:]:
        if haversine_meters(last, p) >= min_meters:
            out.append(p)
            last = p
    if out[-1] is not points[-1]:
        out.append(points[-1])
    return out
