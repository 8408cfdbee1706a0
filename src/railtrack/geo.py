"""Great-circle distance between coordinates."""

from __future__ import annotations

import math
from typing import Protocol

from railtrack._constants import EARTH_RADIUS_KM


class Coordinate(Protocol):
    """Anything carrying latitude/longitude in decimal degrees."""

    @property
    def lat(self) -> float: ...

    @property
    def lng(self) -> float: ...


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in kilometres on a sphere of radius 6371 km."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = math.sin(d_lat / 2) ** 2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between *a* and *b* in kilometres."""
    return haversine_km(a.lat, a.lng, b.lat, b.lng)
