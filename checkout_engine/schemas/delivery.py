from pydantic import BaseModel, Field

from checkout_engine.models.delivery import DeliveryAreaType, LocationFailure, ZoneMethod


class GeoPointIn(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class DeliveryAreaIn(BaseModel):
    delivery_area_type: DeliveryAreaType = DeliveryAreaType.none
    delivery_countries: list[str] = []
    delivery_zone_method: ZoneMethod | None = None
    delivery_zone_coordinates: GeoPointIn | None = None
    delivery_zone_radius: float | None = Field(default=None, ge=0)
    delivery_zone_polygon: list[GeoPointIn] | None = None
    require_location: bool = True


class DeliveryCheckRequest(BaseModel):
    store: DeliveryAreaIn
    location: GeoPointIn | None = None
    location_error: LocationFailure | None = None
    country_code: str | None = Field(default=None, min_length=2, max_length=2)


class DeliveryCheckResponse(BaseModel):
    status: str
    allowed: bool
    distance_km: float | None = None
    location_failure: LocationFailure | None = None
