"""Geospatial utilities (no external dependencies)."""

from __future__ import annotations

import math
from typing import Iterable


def deg2rad(deg: float) -> float:
    return deg * math.pi / 180.0


def rad2deg(rad: float) -> float:
    return rad * 180.0 / math.pi


def is_valid_degrees(lat: float, lon: float) -> bool:
    """Check that a lat/lon pair in degrees is finite and in range."""

    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return abs(lat) <= 90.0 and abs(lon) <= 180.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute Haversine distance in meters between two lat/lon points.

    Args:
        lat1: Latitude 1 in degrees.
        lon1: Longitude 1 in degrees.
        lat2: Latitude 2 in degrees.
        lon2: Longitude 2 in degrees.

    Returns:
        Distance in meters.
    """

    r = 6_371_000.0  # mean Earth radius in meters
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return r * c


def polyline_length_m(coords: Iterable[tuple[float, float]]) -> float:
    """Sum of Haversine distances along (lat, lon) pairs in degrees."""

    total = 0.0
    prev: tuple[float, float] | None = None
    for cur in coords:
        if prev is not None:
            total += haversine_m(prev[0], prev[1], cur[0], cur[1])
        prev = cur
    return total
