from __future__ import annotations

import math
from typing import Optional

from ..core.constants import EARTH_RADIUS_KM
from ..core.exceptions import NoZoneConfigured
from .model import Coordinate, GeofenceResult, LocationConfig


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push a past 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class GeofenceValidator:
    """Decide whether a coordinate lies inside a circular zone.

    Boundary is inclusive. Pure: no caching, no device or network access.
    """

    def evaluate(self, point: Coordinate, zone: LocationConfig) -> GeofenceResult:
        distance = haversine_km(point.latitude, point.longitude, zone.latitude, zone.longitude)
        return GeofenceResult(within_zone=distance <= zone.radius_km, distance_km=distance)

    def resolve_zone(
        self,
        course_override: Optional[LocationConfig],
        global_default: Optional[LocationConfig],
        *,
        course_id: Optional[str] = None,
    ) -> LocationConfig:
        if course_override is not None:
            return course_override
        if global_default is not None:
            return global_default
        raise NoZoneConfigured(course_id)
