from __future__ import annotations

from decimal import Decimal
from typing import Mapping

from checkout_engine.models.cart import Cart, CartLine
from checkout_engine.models.shipping import (
    DeliveryLocation,
    ProductShipping,
    ShippingAreaMode,
    ShippingCalculationMethod,
    ShippingConfig,
)
from checkout_engine.services.pricing import ZERO, quantize_money


_ZONE_ALIASES: dict[str, DeliveryLocation] = {
    "inside": DeliveryLocation.inside,
    "inside_dhaka": DeliveryLocation.inside,
    "outside": DeliveryLocation.outside,
    "outside_dhaka": DeliveryLocation.outside,
}


class InvalidShippingConfigError(ValueError):
    pass


class ZoneNotServedError(ValueError):
    pass


def resolve_zone_label(raw: str | DeliveryLocation, config: ShippingConfig) -> DeliveryLocation:
    """Parse a customer-supplied delivery location and check the store ships there."""
    if isinstance(raw, DeliveryLocation):
        zone = raw
    else:
        zone_or_none = _ZONE_ALIASES.get((raw or "").strip().lower())
        if zone_or_none is None:
            raise ZoneNotServedError(f"Unknown delivery location: {raw!r}")
        zone = zone_or_none
    if config.area_mode != ShippingAreaMode.both and config.area_mode.value != zone.value:
        raise ZoneNotServedError(f"Store does not deliver {zone.value}")
    return zone


def effective_rate(
    line: CartLine,
    zone: DeliveryLocation,
    overrides: Mapping[str, ProductShipping],
    config: ShippingConfig,
) -> Decimal:
    override = overrides.get(line.product_id)
    charge = override.charge_for(zone) if override is not None else None
    if charge is None:
        charge = config.default_charge(zone)
    return Decimal(charge)


def compute_shipping(
    cart: Cart,
    zone: DeliveryLocation,
    overrides: Mapping[str, ProductShipping],
    config: ShippingConfig,
) -> Decimal:
    if not cart:
        return ZERO
    method = config.calculation_method
    if method == ShippingCalculationMethod.flat_rate:
        # One shipment: bounded by the most expensive line to ship.
        total = max(effective_rate(line, zone, overrides, config) for line in cart)
    elif method == ShippingCalculationMethod.per_product:
        rates: dict[str, Decimal] = {}
        for line in cart:
            rates.setdefault(line.product_id, effective_rate(line, zone, overrides, config))
        total = sum(rates.values(), start=ZERO)
    elif method == ShippingCalculationMethod.per_item:
        total = sum(
            (effective_rate(line, zone, overrides, config) * int(line.quantity) for line in cart),
            start=ZERO,
        )
    else:
        raise InvalidShippingConfigError(f"Unknown shipping calculation method: {method!r}")
    if total < 0:
        raise InvalidShippingConfigError("Shipping charges must be non-negative")
    return quantize_money(total)


def return_charge(config: ShippingConfig) -> Decimal:
    return quantize_money(config.default_return_charge)
