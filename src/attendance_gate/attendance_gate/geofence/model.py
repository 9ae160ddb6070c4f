from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.exceptions import InvalidCoordinate, InvalidZone


def _check_lat_lon(latitude: Any, longitude: Any, error: type[Exception]) -> tuple[float, float]:
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise error(f"Coordinate is not numeric: ({latitude!r}, {longitude!r})") from None
    if isinstance(latitude, bool) or isinstance(longitude, bool):
        raise error("Coordinate is not numeric")
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise error(f"Coordinate is not finite: ({lat}, {lon})")
    if not -90.0 <= lat <= 90.0:
        raise error(f"Latitude out of range [-90, 90]: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise error(f"Longitude out of range [-180, 180]: {lon}")
    return lat, lon


@dataclass(frozen=True)
class Coordinate:
    """Device position in signed degrees."""

    latitude: float
    longitude: float
    accuracy_m: Optional[float] = None

    def __post_init__(self):
        lat, lon = _check_lat_lon(self.latitude, self.longitude, InvalidCoordinate)
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Coordinate":
        if data is None or "latitude" not in data or "longitude" not in data:
            raise InvalidCoordinate("Both latitude and longitude are required")
        return cls(latitude=data["latitude"], longitude=data["longitude"], accuracy_m=data.get("accuracy"))


@dataclass(frozen=True)
class LocationConfig:
    """Circular zone: center plus radius in km."""

    latitude: float
    longitude: float
    radius_km: float
    label: str = ""

    def __post_init__(self):
        lat, lon = _check_lat_lon(self.latitude, self.longitude, InvalidZone)
        try:
            radius = float(self.radius_km)
        except (TypeError, ValueError):
            raise InvalidZone(f"Radius is not numeric: {self.radius_km!r}") from None
        if not math.isfinite(radius) or radius <= 0:
            raise InvalidZone(f"Radius must be a positive number of km: {self.radius_km!r}")
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)
        object.__setattr__(self, "radius_km", radius)
        object.__setattr__(self, "label", self.label or "")

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radius_km": self.radius_km,
            "label": self.label,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LocationConfig":
        # "radius"/"locationName" are the keys the admin screen posts.
        radius = data.get("radius_km", data.get("radius"))
        if "latitude" not in data or "longitude" not in data or radius is None:
            raise InvalidZone("latitude, longitude and radius_km are required")
        return cls(
            latitude=data["latitude"],
            longitude=data["longitude"],
            radius_km=radius,
            label=data.get("label", data.get("locationName")) or "",
        )


@dataclass(frozen=True)
class GeofenceResult:
    within_zone: bool
    distance_km: float
