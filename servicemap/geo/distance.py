"""
Great-circle distance between geographic points.
The same function backs the radius filter, the nearest-first ordering and the distance shown to callers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = EARTH_RADIUS_KM * 1000.0
DISTANCE_SCALE = 10_000

# Degrees of slack added to every bounding box edge.
_BOX_MARGIN_DEGREES = 1e-6


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude!r}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude!r}")


@dataclass(frozen=True)
class BoundingBox:
    """Lat/lng rectangle containing every point within a radius of a centre.

    `min_longitude`/`max_longitude` are None when the circle touches a pole
    or crosses the antimeridian; longitude is then unconstrained.
    """

    min_latitude: float
    max_latitude: float
    min_longitude: float | None
    max_longitude: float | None

    @property
    def constrains_longitude(self) -> bool:
        return self.min_longitude is not None and self.max_longitude is not None


def _round_half_up(value: float) -> float:
    return math.floor(value * DISTANCE_SCALE + 0.5) / DISTANCE_SCALE


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) * math.sin(d_lat / 2)
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lng / 2)
        * math.sin(d_lng / 2)
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance in meters, rounded half-up to 4 decimal places."""

    return _round_half_up(haversine_km(a, b) * 1000.0)


def bounding_box(center: GeoPoint, radius_meters: float) -> BoundingBox:
    """Smallest lat/lng box that contains the circle around `center`."""

    angular = radius_meters / EARTH_RADIUS_M
    lat_rad = math.radians(center.latitude)
    delta_lat = math.degrees(angular)

    min_lat = center.latitude - delta_lat - _BOX_MARGIN_DEGREES
    max_lat = center.latitude + delta_lat + _BOX_MARGIN_DEGREES
    if min_lat <= -90.0 or max_lat >= 90.0:
        return BoundingBox(max(min_lat, -90.0), min(max_lat, 90.0), None, None)

    ratio = math.sin(angular) / math.cos(lat_rad)
    if ratio >= 1.0:
        return BoundingBox(min_lat, max_lat, None, None)

    delta_lng = math.degrees(math.asin(ratio))
    min_lng = center.longitude - delta_lng - _BOX_MARGIN_DEGREES
    max_lng = center.longitude + delta_lng + _BOX_MARGIN_DEGREES
    if min_lng < -180.0 or max_lng > 180.0:
        return BoundingBox(min_lat, max_lat, None, None)
    return BoundingBox(min_lat, max_lat, min_lng, max_lng)
