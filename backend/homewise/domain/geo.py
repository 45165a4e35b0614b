# homewise/domain/geo.py
from __future__ import annotations

import math

from .types import GeoPoint

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in metres."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    central_angle = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_M * central_angle


def bounding_box(center: GeoPoint, radius_m: float) -> tuple[float, float, float, float]:
    """
    (min_lat, max_lat, min_lng, max_lng) enclosing a circle of `radius_m`.
    Used as a cheap SQL prefilter; callers still apply haversine_m exactly.
    """
    d_lat = math.degrees(radius_m / EARTH_RADIUS_M)

    cos_lat = math.cos(math.radians(center.lat))
    if cos_lat < 1e-9:
        # at a pole every longitude is in range
        return center.lat - d_lat, center.lat + d_lat, -180.0, 180.0

    d_lng = math.degrees(radius_m / (EARTH_RADIUS_M * cos_lat))
    return (
        max(-90.0, center.lat - d_lat),
        min(90.0, center.lat + d_lat),
        max(-180.0, center.lng - d_lng),
        min(180.0, center.lng + d_lng),
    )


def in_annulus(distance_m: float, inner_m: float, outer_m: float, *, closed: bool = False) -> bool:
    """
    Half-open ring [inner, outer): consecutive rings never share a point.
    `closed` includes the outer edge, for the last ring of a search.
    """
    if closed:
        return inner_m <= distance_m <= outer_m
    return inner_m <= distance_m < outer_m
