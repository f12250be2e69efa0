from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal


class DeliveryLocation(str, enum.Enum):
    inside = "inside"
    outside = "outside"


class ShippingAreaMode(str, enum.Enum):
    both = "both"
    inside = "inside"
    outside = "outside"


class ShippingCalculationMethod(str, enum.Enum):
    flat_rate = "flat_rate"
    per_product = "per_product"
    per_item = "per_item"


@dataclass(frozen=True)
class ShippingConfig:
    default_inside_charge: Decimal = Decimal("60")
    default_outside_charge: Decimal = Decimal("120")
    calculation_method: ShippingCalculationMethod = ShippingCalculationMethod.flat_rate
    area_mode: ShippingAreaMode = ShippingAreaMode.both
    default_return_charge: Decimal = Decimal("0")

    def default_charge(self, zone: DeliveryLocation) -> Decimal:
        if zone == DeliveryLocation.inside:
            return self.default_inside_charge
        return self.default_outside_charge


@dataclass(frozen=True)
class ProductShipping:
    """Per-product shipping overrides; ``None`` falls back to the store default."""

    shipping_inside: Decimal | None = None
    shipping_outside: Decimal | None = None

    def charge_for(self, zone: DeliveryLocation) -> Decimal | None:
        if zone == DeliveryLocation.inside:
            return self.shipping_inside
        return self.shipping_outside
