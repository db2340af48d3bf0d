"""
Swipematch — Great-circle distance between profile locations.

Distances use the haversine formula on a sphere of radius 6371 km:

  a = sin²(Δφ/2) + cos φ1 · cos φ2 · sin²(Δλ/2)
  d = 2R · atan2(√a, √(1 − a))

Locations are optional.  A missing coordinate is modelled as ``None`` rather
than ``(0, 0)``; ``distance_between`` treats a missing side as distance 0.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in degrees."""

    lat: float
    lon: float

    @classmethod
    def from_nullable(cls, lat: float | None, lon: float | None) -> Coordinate | None:
        """Build a coordinate only when both components are present."""
        if lat is None or lon is None:
            return None
        return cls(lat=float(lat), lon=float(lon))


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance in kilometres between two points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Rounding can push ``a`` a hair past 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_between(origin: Coordinate | None, target: Coordinate | None) -> float:
    """Distance in km, or 0.0 when either location is unknown."""
    if origin is None or target is None:
        return 0.0
    return haversine_distance(origin.lat, origin.lon, target.lat, target.lon)
