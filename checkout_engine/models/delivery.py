from __future__ import annotations

import enum
from dataclasses import dataclass


class ZoneMethod(str, enum.Enum):
    radius = "radius"
    manual = "manual"
    none = "none"


class DeliveryAreaType(str, enum.Enum):
    none = "none"
    country = "country"
    map = "map"


class LocationFailure(str, enum.Enum):
    permission_denied = "permission_denied"
    timeout = "timeout"
    unavailable = "unavailable"


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= float(self.lat) <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= float(self.lng) <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lng}")


@dataclass(frozen=True)
class DeliveryZone:
    method: ZoneMethod = ZoneMethod.none
    center: GeoPoint | None = None
    radius_km: float | None = None
    polygon: tuple[GeoPoint, ...] | None = None


@dataclass(frozen=True)
class DeliveryAreaSettings:
    area_type: DeliveryAreaType = DeliveryAreaType.none
    countries: frozenset[str] = frozenset()
    zone: DeliveryZone = DeliveryZone()
    require_location: bool = False
