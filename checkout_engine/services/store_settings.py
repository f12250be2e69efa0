"""Turn raw store, product and coupon rows into engine inputs.

Rows are plain mappings as read by the caller from its database (column name
to value). Missing values fall back to the platform defaults; values that are
present but malformed raise, since they point at store data that has to be
fixed rather than silently priced around.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from checkout_engine.core.config import settings
from checkout_engine.models.cart import CartLine
from checkout_engine.models.coupon import Coupon, CouponScope, DiscountTier, DiscountType, TierDiscountType
from checkout_engine.models.delivery import (
    DeliveryAreaSettings,
    DeliveryAreaType,
    DeliveryZone,
    GeoPoint,
    ZoneMethod,
)
from checkout_engine.models.payment import ProductPaymentSettings
from checkout_engine.models.shipping import (
    ProductShipping,
    ShippingAreaMode,
    ShippingCalculationMethod,
    ShippingConfig,
)
from checkout_engine.services.coupons import InvalidCouponConfigError, normalize_code
from checkout_engine.services.geofence import InvalidDeliveryZoneError
from checkout_engine.services.shipping import InvalidShippingConfigError


_AREA_MODE_ALIASES: dict[str, ShippingAreaMode] = {
    "both": ShippingAreaMode.both,
    "inside": ShippingAreaMode.inside,
    "inside_dhaka": ShippingAreaMode.inside,
    "outside": ShippingAreaMode.outside,
    "outside_dhaka": ShippingAreaMode.outside,
}


def _is_blank(value: object | None) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_decimal(value: object | None, *, fallback: Decimal | None, error: type[ValueError], field: str) -> Decimal | None:
    if _is_blank(value):
        return fallback
    if isinstance(value, bool):
        raise error(f"{field}: expected a number, got {value!r}")
    if isinstance(value, Decimal):
        parsed = value
    else:
        try:
            parsed = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise error(f"{field}: expected a number, got {value!r}") from exc
    if not parsed.is_finite():
        raise error(f"{field}: expected a finite number, got {value!r}")
    return parsed


def _parse_non_negative(value: object | None, *, fallback: Decimal, error: type[ValueError], field: str) -> Decimal:
    parsed = _parse_decimal(value, fallback=fallback, error=error, field=field)
    if parsed is None:
        return fallback
    if parsed < 0:
        raise error(f"{field}: must be non-negative, got {parsed}")
    return parsed


def _parse_int(value: object | None, *, fallback: int | None, error: type[ValueError], field: str) -> int | None:
    if _is_blank(value):
        return fallback
    if isinstance(value, bool):
        raise error(f"{field}: expected an integer, got {value!r}")
    try:
        return int(str(value).strip()) if isinstance(value, str) else int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        raise error(f"{field}: expected an integer, got {value!r}") from exc


def _parse_bool(value: object | None, *, fallback: bool) -> bool:
    if value is None:
        return fallback
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        candidate = value.strip().lower()
        if candidate in {"1", "true", "yes", "on"}:
            return True
        if candidate in {"0", "false", "no", "off"}:
            return False
    return fallback


def _parse_enum(value: object | None, enum_cls: Any, *, fallback: Any, error: type[ValueError], field: str) -> Any:
    if _is_blank(value):
        return fallback
    raw = str(getattr(value, "value", value)).strip().lower()
    try:
        return enum_cls(raw)
    except ValueError as exc:
        raise error(f"{field}: unsupported value {value!r}") from exc


def _parse_datetime(value: object | None, *, field: str) -> datetime | None:
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise InvalidCouponConfigError(f"{field}: invalid timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_point(value: object | None, *, field: str) -> GeoPoint | None:
    if value is None:
        return None
    if not isinstance(value, Mapping) or "lat" not in value or "lng" not in value:
        raise InvalidDeliveryZoneError(f"{field}: expected {{lat, lng}}, got {value!r}")
    try:
        return GeoPoint(lat=float(value["lat"]), lng=float(value["lng"]))
    except (TypeError, ValueError) as exc:
        raise InvalidDeliveryZoneError(f"{field}: invalid coordinate {value!r}") from exc


def _id_set(values: Iterable[Any] | None) -> frozenset[str]:
    return frozenset(str(v) for v in (values or ()) if not _is_blank(v))


def shipping_config_from_row(row: Mapping[str, Any]) -> ShippingConfig:
    area_raw = row.get("shipping_area_mode")
    area_mode = ShippingAreaMode.both
    if not _is_blank(area_raw):
        mode = _AREA_MODE_ALIASES.get(str(getattr(area_raw, "value", area_raw)).strip().lower())
        if mode is None:
            raise InvalidShippingConfigError(f"shipping_area_mode: unsupported value {area_raw!r}")
        area_mode = mode
    return ShippingConfig(
        default_inside_charge=_parse_non_negative(
            row.get("default_shipping_inside"),
            fallback=settings.default_shipping_inside,
            error=InvalidShippingConfigError,
            field="default_shipping_inside",
        ),
        default_outside_charge=_parse_non_negative(
            row.get("default_shipping_outside"),
            fallback=settings.default_shipping_outside,
            error=InvalidShippingConfigError,
            field="default_shipping_outside",
        ),
        calculation_method=_parse_enum(
            row.get("shipping_calculation_method"),
            ShippingCalculationMethod,
            fallback=ShippingCalculationMethod.flat_rate,
            error=InvalidShippingConfigError,
            field="shipping_calculation_method",
        ),
        area_mode=area_mode,
        default_return_charge=_parse_non_negative(
            row.get("default_return_charge"),
            fallback=settings.default_return_charge,
            error=InvalidShippingConfigError,
            field="default_return_charge",
        ),
    )


def product_shipping_from_row(row: Mapping[str, Any]) -> ProductShipping:
    inside = _parse_decimal(row.get("shipping_inside"), fallback=None, error=InvalidShippingConfigError, field="shipping_inside")
    outside = _parse_decimal(row.get("shipping_outside"), fallback=None, error=InvalidShippingConfigError, field="shipping_outside")
    for field, value in (("shipping_inside", inside), ("shipping_outside", outside)):
        if value is not None and value < 0:
            raise InvalidShippingConfigError(f"{field}: must be non-negative, got {value}")
    return ProductShipping(shipping_inside=inside, shipping_outside=outside)


def shipping_overrides_from_rows(rows: Iterable[Mapping[str, Any]]) -> dict[str, ProductShipping]:
    return {str(row["id"]): product_shipping_from_row(row) for row in rows}


def _delivery_zone_from_row(row: Mapping[str, Any]) -> DeliveryZone:
    method = _parse_enum(
        row.get("delivery_zone_method"),
        ZoneMethod,
        fallback=ZoneMethod.radius,
        error=InvalidDeliveryZoneError,
        field="delivery_zone_method",
    )
    if method == ZoneMethod.radius:
        radius = _parse_decimal(
            row.get("delivery_zone_radius"),
            fallback=Decimal(str(settings.default_delivery_radius_km)),
            error=InvalidDeliveryZoneError,
            field="delivery_zone_radius",
        )
        return DeliveryZone(
            method=method,
            center=_parse_point(row.get("delivery_zone_coordinates"), field="delivery_zone_coordinates"),
            radius_km=float(radius) if radius is not None else None,
        )
    if method == ZoneMethod.manual:
        raw_polygon = row.get("delivery_zone_polygon") or []
        if not isinstance(raw_polygon, (list, tuple)):
            raise InvalidDeliveryZoneError("delivery_zone_polygon: expected a list of {lat, lng}")
        polygon = tuple(
            p for p in (_parse_point(v, field="delivery_zone_polygon") for v in raw_polygon) if p is not None
        )
        return DeliveryZone(method=method, polygon=polygon)
    return DeliveryZone(method=ZoneMethod.none)


def delivery_area_from_row(row: Mapping[str, Any]) -> DeliveryAreaSettings:
    area_type = _parse_enum(
        row.get("delivery_area_type"),
        DeliveryAreaType,
        fallback=DeliveryAreaType.none,
        error=InvalidDeliveryZoneError,
        field="delivery_area_type",
    )
    if area_type == DeliveryAreaType.country:
        return DeliveryAreaSettings(
            area_type=area_type,
            countries=frozenset(c.upper() for c in _id_set(row.get("delivery_countries"))),
        )
    if area_type == DeliveryAreaType.map:
        return DeliveryAreaSettings(
            area_type=area_type,
            zone=_delivery_zone_from_row(row),
            require_location=_parse_bool(row.get("require_location"), fallback=True),
        )
    return DeliveryAreaSettings()


def _tier_from_row(row: Mapping[str, Any]) -> DiscountTier:
    min_amount = _parse_decimal(row.get("min_amount"), fallback=None, error=InvalidCouponConfigError, field="min_amount")
    value = _parse_decimal(row.get("discount_value"), fallback=None, error=InvalidCouponConfigError, field="discount_value")
    if min_amount is None or value is None:
        raise InvalidCouponConfigError("discount_tiers: each tier needs min_amount and discount_value")
    return DiscountTier(
        min_amount=min_amount,
        discount_type=_parse_enum(
            row.get("discount_type"),
            TierDiscountType,
            fallback=TierDiscountType.percentage,
            error=InvalidCouponConfigError,
            field="discount_tiers.discount_type",
        ),
        discount_value=value,
    )


def coupon_from_row(row: Mapping[str, Any]) -> Coupon:
    code = normalize_code(row.get("code"))
    if not code:
        raise InvalidCouponConfigError("code: coupon code is required")
    discount_type = _parse_enum(
        row.get("discount_type"), DiscountType, fallback=None, error=InvalidCouponConfigError, field="discount_type"
    )
    if discount_type is None:
        raise InvalidCouponConfigError(f"discount_type: required for coupon {code}")
    valid_from = _parse_datetime(row.get("valid_from"), field="valid_from")
    if valid_from is None:
        raise InvalidCouponConfigError(f"valid_from: required for coupon {code}")
    tiers_raw = row.get("discount_tiers") or []
    if not isinstance(tiers_raw, (list, tuple)):
        raise InvalidCouponConfigError("discount_tiers: expected a list")

    def _decimal(field: str, fallback: Decimal | None) -> Decimal | None:
        return _parse_decimal(row.get(field), fallback=fallback, error=InvalidCouponConfigError, field=field)

    def _int(field: str, fallback: int | None) -> int | None:
        return _parse_int(row.get(field), fallback=fallback, error=InvalidCouponConfigError, field=field)

    return Coupon(
        code=code,
        discount_type=discount_type,
        discount_value=_decimal("discount_value", Decimal("0")) or Decimal("0"),
        applies_to=_parse_enum(
            row.get("applies_to"), CouponScope, fallback=CouponScope.all, error=InvalidCouponConfigError, field="applies_to"
        ),
        product_ids=_id_set(row.get("product_ids")),
        category_ids=_id_set(row.get("category_ids")),
        valid_from=valid_from,
        valid_until=_parse_datetime(row.get("valid_until"), field="valid_until"),
        max_uses=_int("max_uses", None),
        uses_count=_int("uses_count", 0) or 0,
        minimum_purchase=_decimal("minimum_purchase", None),
        # Unset (or zero) BOGO quantities mean "buy one, get one".
        bogo_buy_quantity=_int("bogo_buy_quantity", 1) or 1,
        bogo_get_quantity=_int("bogo_get_quantity", 1) or 1,
        bogo_get_discount_percentage=_decimal("bogo_get_discount_percentage", Decimal("100")) or Decimal("0"),
        discount_tiers=tuple(_tier_from_row(t) for t in tiers_raw),
        active=_parse_bool(row.get("is_active"), fallback=True),
    )


def product_payment_from_row(row: Mapping[str, Any]) -> ProductPaymentSettings:
    pct = _parse_non_negative(
        row.get("minimum_payment_percentage"),
        fallback=Decimal("0"),
        error=ValueError,
        field="minimum_payment_percentage",
    )
    return ProductPaymentSettings(
        requires_full_payment=_parse_bool(row.get("requires_full_payment"), fallback=False),
        allows_cod=_parse_bool(row.get("allows_cod"), fallback=False),
        minimum_payment_percentage=min(pct, Decimal("100")),
    )


def cart_from_rows(rows: Iterable[Mapping[str, Any]]) -> list[CartLine]:
    lines: list[CartLine] = []
    for row in rows:
        price = _parse_decimal(row.get("unit_price", row.get("price")), fallback=None, error=ValueError, field="unit_price")
        quantity = _parse_int(row.get("quantity"), fallback=None, error=ValueError, field="quantity")
        if price is None or quantity is None:
            raise ValueError(f"Cart line {row.get('product_id')!r} needs unit_price and quantity")
        category = row.get("category_id")
        lines.append(
            CartLine(
                product_id=str(row.get("product_id") or ""),
                unit_price=price,
                quantity=quantity,
                category_id=None if _is_blank(category) else str(category),
            )
        )
    return lines
