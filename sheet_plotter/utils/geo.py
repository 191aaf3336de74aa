"""Geospatial helpers."""

from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt
from typing import Iterable, Sequence

from ..core.models import CoordinatePair


EARTH_RADIUS_METERS = 6_371_000


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the distance between two coordinates in meters."""

    phi1 = radians(lat1)
    phi2 = radians(lat2)
    delta_phi = radians(lat2 - lat1)
    delta_lambda = radians(lon2 - lon1)

    a = sin(delta_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(delta_lambda / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def great_circle_distance(a: CoordinatePair, b: CoordinatePair) -> float:
    """Return the haversine distance between two coordinate pairs in meters."""

    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def spherical_polygon_area(ring: Sequence[CoordinatePair]) -> float:
    """Return the area enclosed by ``ring`` in square meters.

    The ring is closed implicitly: the last vertex connects back to the
    first. Self-intersecting rings are not detected and give a numeric but
    meaningless result.
    """

    count = len(ring)
    if count < 3:
        return 0.0

    total = 0.0
    for index in range(count):
        lat1, lng1 = ring[index]
        lat2, lng2 = ring[(index + 1) % count]
        total += radians(lng2 - lng1) * (2 + sin(radians(lat1)) + sin(radians(lat2)))

    return abs(total * EARTH_RADIUS_METERS * EARTH_RADIUS_METERS / 2)


def bounding_box(
    points: Iterable[CoordinatePair], *, pad: float = 0.0
) -> tuple[tuple[float, float], tuple[float, float]] | None:
    """Return ``((south, west), (north, east))`` around ``points``.

    ``pad`` grows the box on every side by that fraction of its span.
    Returns ``None`` when there are no points.
    """

    points = list(points)
    if not points:
        return None

    south = min(point.lat for point in points)
    north = max(point.lat for point in points)
    west = min(point.lng for point in points)
    east = max(point.lng for point in points)

    lat_pad = (north - south) * pad
    lng_pad = (east - west) * pad
    return (south - lat_pad, west - lng_pad), (north + lat_pad, east + lng_pad)
