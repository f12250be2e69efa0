from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from checkout_engine.core.config import settings
from checkout_engine.models.coupon import CouponScope, DiscountType, TierDiscountType
from checkout_engine.models.delivery import DeliveryAreaType, GeoPoint, ZoneMethod
from checkout_engine.models.shipping import ShippingAreaMode, ShippingCalculationMethod
from checkout_engine.services import store_settings
from checkout_engine.services.coupons import InvalidCouponConfigError
from checkout_engine.services.geofence import InvalidDeliveryZoneError
from checkout_engine.services.shipping import InvalidShippingConfigError


def test_shipping_config_defaults_when_row_is_empty() -> None:
    config = store_settings.shipping_config_from_row({})
    assert config.default_inside_charge == settings.default_shipping_inside
    assert config.default_outside_charge == settings.default_shipping_outside
    assert config.calculation_method == ShippingCalculationMethod.flat_rate
    assert config.area_mode == ShippingAreaMode.both


def test_shipping_config_parses_strings_and_legacy_area_labels() -> None:
    config = store_settings.shipping_config_from_row(
        {
            "shipping_area_mode": "inside_dhaka",
            "default_shipping_inside": "45.50",
            "default_shipping_outside": " ",
            "shipping_calculation_method": "PER_ITEM",
            "default_return_charge": 20,
        }
    )
    assert config.area_mode == ShippingAreaMode.inside
    assert config.default_inside_charge == Decimal("45.50")
    assert config.default_outside_charge == settings.default_shipping_outside
    assert config.calculation_method == ShippingCalculationMethod.per_item
    assert config.default_return_charge == Decimal("20")


@pytest.mark.parametrize(
    "row",
    [
        {"shipping_calculation_method": "by_weight"},
        {"shipping_area_mode": "everywhere"},
        {"default_shipping_inside": "-5"},
        {"default_shipping_outside": "cheap"},
        {"default_shipping_outside": "NaN"},
        {"default_shipping_inside": "Infinity"},
        {"default_return_charge": "-inf"},
    ],
)
def test_shipping_config_rejects_malformed_values(row: dict) -> None:
    with pytest.raises(InvalidShippingConfigError):
        store_settings.shipping_config_from_row(row)


def test_shipping_overrides_keep_missing_values_as_none() -> None:
    overrides = store_settings.shipping_overrides_from_rows(
        [{"id": "p1", "shipping_inside": "0", "shipping_outside": None}, {"id": 7}]
    )
    assert overrides["p1"].shipping_inside == Decimal("0")
    assert overrides["p1"].shipping_outside is None
    assert overrides["7"].shipping_inside is None


def test_coupon_from_row() -> None:
    coupon = store_settings.coupon_from_row(
        {
            "code": " summer ",
            "discount_type": "tiered",
            "applies_to": "categories",
            "category_ids": ["c1", "", None],
            "valid_from": "2026-01-01T00:00:00",
            "valid_until": "2026-02-01T00:00:00Z",
            "max_uses": "10",
            "uses_count": None,
            "minimum_purchase": "",
            "discount_tiers": [
                {"min_amount": "100", "discount_type": "fixed", "discount_value": "15"},
                {"min_amount": 50, "discount_value": 5},
            ],
            "is_active": "yes",
        }
    )
    assert coupon.code == "SUMMER"
    assert coupon.discount_type == DiscountType.tiered
    assert coupon.applies_to == CouponScope.categories
    assert coupon.category_ids == frozenset({"c1"})
    assert coupon.valid_from == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert coupon.valid_until == datetime(2026, 2, 1, tzinfo=timezone.utc)
    assert coupon.max_uses == 10
    assert coupon.uses_count == 0
    assert coupon.minimum_purchase is None
    assert coupon.discount_tiers[0].discount_type == TierDiscountType.fixed
    assert coupon.discount_tiers[1].discount_type == TierDiscountType.percentage
    assert coupon.active is True


def test_coupon_from_row_defaults_unset_bogo_quantities() -> None:
    coupon = store_settings.coupon_from_row(
        {
            "code": "B1G1",
            "discount_type": "bogo",
            "valid_from": "2026-01-01T00:00:00Z",
            "bogo_buy_quantity": 0,
            "bogo_get_quantity": None,
        }
    )
    assert coupon.bogo_buy_quantity == 1
    assert coupon.bogo_get_quantity == 1
    assert coupon.bogo_get_discount_percentage == Decimal("100")


@pytest.mark.parametrize(
    "row",
    [
        {"discount_type": "percentage", "valid_from": "2026-01-01"},
        {"code": "X", "valid_from": "2026-01-01"},
        {"code": "X", "discount_type": "cashback", "valid_from": "2026-01-01"},
        {"code": "X", "discount_type": "percentage"},
        {"code": "X", "discount_type": "percentage", "valid_from": "yesterday"},
        {"code": "X", "discount_type": "percentage", "valid_from": "2026-01-01", "max_uses": "many"},
        {"code": "X", "discount_type": "tiered", "valid_from": "2026-01-01", "discount_tiers": [{"min_amount": 1}]},
        {"code": "X", "discount_type": "percentage", "valid_from": "2026-01-01", "discount_value": "NaN"},
        {"code": "X", "discount_type": "percentage", "valid_from": "2026-01-01", "minimum_purchase": "Infinity"},
        {
            "code": "X",
            "discount_type": "tiered",
            "valid_from": "2026-01-01",
            "discount_tiers": [{"min_amount": "NaN", "discount_value": "5"}],
        },
    ],
)
def test_coupon_from_row_rejects_malformed_rows(row: dict) -> None:
    with pytest.raises(InvalidCouponConfigError):
        store_settings.coupon_from_row(row)


def test_delivery_area_radius_defaults() -> None:
    area = store_settings.delivery_area_from_row(
        {"delivery_area_type": "map", "delivery_zone_coordinates": {"lat": "23.8", "lng": 90.4}}
    )
    assert area.area_type == DeliveryAreaType.map
    assert area.require_location is True
    assert area.zone.method == ZoneMethod.radius
    assert area.zone.center == GeoPoint(23.8, 90.4)
    assert area.zone.radius_km == settings.default_delivery_radius_km


def test_delivery_area_manual_polygon() -> None:
    area = store_settings.delivery_area_from_row(
        {
            "delivery_area_type": "map",
            "delivery_zone_method": "manual",
            "delivery_zone_polygon": [{"lat": 0, "lng": 0}, {"lat": 0, "lng": 1}, {"lat": 1, "lng": 1}],
            "require_location": "false",
        }
    )
    assert area.zone.method == ZoneMethod.manual
    assert area.zone.polygon is not None
    assert len(area.zone.polygon) == 3
    assert area.require_location is False


def test_delivery_area_country_codes_are_upper_cased() -> None:
    area = store_settings.delivery_area_from_row({"delivery_area_type": "country", "delivery_countries": ["bd", "in"]})
    assert area.countries == frozenset({"BD", "IN"})


def test_delivery_area_defaults_to_unrestricted() -> None:
    assert store_settings.delivery_area_from_row({}).area_type == DeliveryAreaType.none


@pytest.mark.parametrize(
    "row",
    [
        {"delivery_area_type": "planet"},
        {"delivery_area_type": "map", "delivery_zone_method": "hexagon"},
        {"delivery_area_type": "map", "delivery_zone_coordinates": {"lat": 10}},
        {"delivery_area_type": "map", "delivery_zone_method": "manual", "delivery_zone_polygon": "0,0 1,1"},
        {
            "delivery_area_type": "map",
            "delivery_zone_coordinates": {"lat": 23.8, "lng": 90.4},
            "delivery_zone_radius": "NaN",
        },
    ],
)
def test_delivery_area_rejects_malformed_rows(row: dict) -> None:
    with pytest.raises(InvalidDeliveryZoneError):
        store_settings.delivery_area_from_row(row)


def test_product_payment_percentage_is_capped() -> None:
    settings_row = store_settings.product_payment_from_row(
        {"requires_full_payment": 1, "allows_cod": "on", "minimum_payment_percentage": "150"}
    )
    assert settings_row.requires_full_payment is True
    assert settings_row.allows_cod is True
    assert settings_row.minimum_payment_percentage == Decimal("100")


def test_cart_from_rows_accepts_price_alias() -> None:
    lines = store_settings.cart_from_rows(
        [
            {"product_id": "p1", "price": "9.99", "quantity": "3", "category_id": "c1"},
            {"product_id": "p2", "unit_price": 5, "quantity": 1, "category_id": ""},
        ]
    )
    assert lines[0].line_total == Decimal("29.97")
    assert lines[0].category_id == "c1"
    assert lines[1].category_id is None


def test_cart_from_rows_rejects_bad_lines() -> None:
    with pytest.raises(ValueError):
        store_settings.cart_from_rows([{"product_id": "p1", "unit_price": "1"}])
    with pytest.raises(ValueError):
        store_settings.cart_from_rows([{"product_id": "p1", "unit_price": "1", "quantity": 0}])


def test_cart_from_rows_rejects_non_finite_price() -> None:
    with pytest.raises(ValueError, match="finite"):
        store_settings.cart_from_rows([{"product_id": "p1", "unit_price": "NaN", "quantity": 1}])
