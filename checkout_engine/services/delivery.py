from __future__ import annotations

import enum
from dataclasses import dataclass

from checkout_engine.models.delivery import DeliveryAreaSettings, DeliveryAreaType, GeoPoint, LocationFailure
from checkout_engine.services import geofence


class DeliveryStatus(str, enum.Enum):
    available = "available"
    outside_zone = "outside_zone"
    location_unavailable = "location_unavailable"
    country_required = "country_required"
    country_not_served = "country_not_served"


@dataclass(frozen=True)
class DeliveryCheck:
    status: DeliveryStatus
    distance_km: float | None = None
    location_failure: LocationFailure | None = None

    @property
    def allowed(self) -> bool:
        return self.status == DeliveryStatus.available


def _check_country(area: DeliveryAreaSettings, country_code: str | None) -> DeliveryCheck:
    code = (country_code or "").strip().upper()
    if not code:
        return DeliveryCheck(status=DeliveryStatus.country_required)
    served = {c.strip().upper() for c in area.countries}
    if code in served:
        return DeliveryCheck(status=DeliveryStatus.available)
    return DeliveryCheck(status=DeliveryStatus.country_not_served)


def _check_map(area: DeliveryAreaSettings, location: GeoPoint | LocationFailure | None) -> DeliveryCheck:
    if not area.require_location:
        return DeliveryCheck(status=DeliveryStatus.available)
    if location is None:
        return DeliveryCheck(status=DeliveryStatus.location_unavailable, location_failure=LocationFailure.unavailable)
    if isinstance(location, LocationFailure):
        return DeliveryCheck(status=DeliveryStatus.location_unavailable, location_failure=location)
    distance = geofence.distance_to_center_km(location, area.zone)
    inside = geofence.is_inside_zone(location, area.zone)
    return DeliveryCheck(
        status=DeliveryStatus.available if inside else DeliveryStatus.outside_zone,
        distance_km=distance,
    )


def check_delivery(
    area: DeliveryAreaSettings,
    location: GeoPoint | LocationFailure | None = None,
    *,
    country_code: str | None = None,
) -> DeliveryCheck:
    """Decide whether the store delivers to this customer.

    A geolocation failure is reported as ``location_unavailable`` so the
    storefront can ask again; it never counts as being outside the zone.
    """
    if area.area_type == DeliveryAreaType.none:
        return DeliveryCheck(status=DeliveryStatus.available)
    if area.area_type == DeliveryAreaType.country:
        return _check_country(area, country_code)
    if area.area_type == DeliveryAreaType.map:
        return _check_map(area, location)
    raise geofence.InvalidDeliveryZoneError(f"Unknown delivery area type: {area.area_type!r}")
