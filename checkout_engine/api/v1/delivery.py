from fastapi import APIRouter, HTTPException, status

from checkout_engine.core import metrics
from checkout_engine.models.delivery import GeoPoint, LocationFailure
from checkout_engine.schemas.delivery import DeliveryCheckRequest, DeliveryCheckResponse
from checkout_engine.services import delivery as delivery_service
from checkout_engine.services import store_settings

router = APIRouter(prefix="/delivery", tags=["delivery"])


@router.post("/check", response_model=DeliveryCheckResponse)
def check_delivery(payload: DeliveryCheckRequest) -> DeliveryCheckResponse:
    location: GeoPoint | LocationFailure | None = payload.location_error
    if payload.location is not None:
        location = GeoPoint(lat=payload.location.lat, lng=payload.location.lng)
    try:
        area = store_settings.delivery_area_from_row(payload.store.model_dump(mode="json"))
        result = delivery_service.check_delivery(area, location, country_code=payload.country_code)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    metrics.record_delivery_check(result.status.value)
    return DeliveryCheckResponse(
        status=result.status.value,
        allowed=result.allowed,
        distance_km=result.distance_km,
        location_failure=result.location_failure,
    )
