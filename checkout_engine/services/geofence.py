"""Delivery-zone geofencing.

Circles use the haversine great-circle distance; polygons use ray casting on
the (lat, lng) plane. Points that sit exactly on a polygon edge may resolve
either way.
"""

from __future__ import annotations

import logging
from math import asin, cos, radians, sin, sqrt
from typing import Sequence

from checkout_engine.models.delivery import DeliveryZone, GeoPoint, ZoneMethod

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


class InvalidDeliveryZoneError(ValueError):
    pass


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    # Great-circle distance (km).
    dlat = radians(b.lat - a.lat)
    dlng = radians(b.lng - a.lng)
    h = sin(dlat / 2) ** 2 + cos(radians(a.lat)) * cos(radians(b.lat)) * sin(dlng / 2) ** 2
    return float(2 * EARTH_RADIUS_KM * asin(sqrt(min(1.0, h))))


def point_in_polygon(point: GeoPoint, polygon: Sequence[GeoPoint]) -> bool:
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i].lat, polygon[i].lng
        xj, yj = polygon[j].lat, polygon[j].lng
        if (yi > point.lng) != (yj > point.lng):
            x_cross = (xj - xi) * (point.lng - yi) / (yj - yi) + xi
            if point.lat < x_cross:
                inside = not inside
        j = i
    return inside


def distance_to_center_km(point: GeoPoint, zone: DeliveryZone) -> float | None:
    if zone.method != ZoneMethod.radius or zone.center is None:
        return None
    return haversine_km(point, zone.center)


def _check_radius_zone(point: GeoPoint, zone: DeliveryZone) -> bool:
    if zone.center is None:
        raise InvalidDeliveryZoneError("Radius delivery zone has no center")
    if zone.radius_km is None or zone.radius_km < 0:
        raise InvalidDeliveryZoneError(f"Radius delivery zone has an invalid radius: {zone.radius_km!r}")
    return haversine_km(point, zone.center) <= float(zone.radius_km)


def _check_polygon_zone(point: GeoPoint, zone: DeliveryZone) -> bool:
    polygon = zone.polygon or ()
    if not polygon:
        raise InvalidDeliveryZoneError("Manual delivery zone has no polygon vertices")
    if len(polygon) < 3:
        # Fewer than three vertices enclose nothing; treated as unrestricted.
        logger.warning("degenerate_delivery_polygon", extra={"vertices": len(polygon)})
        return True
    return point_in_polygon(point, polygon)


def is_inside_zone(point: GeoPoint, zone: DeliveryZone) -> bool:
    if zone.method == ZoneMethod.none:
        return True
    if zone.method == ZoneMethod.radius:
        return _check_radius_zone(point, zone)
    if zone.method == ZoneMethod.manual:
        return _check_polygon_zone(point, zone)
    raise InvalidDeliveryZoneError(f"Unknown delivery zone method: {zone.method!r}")
