from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


class DiscountType(str, enum.Enum):
    percentage = "percentage"
    fixed = "fixed"
    free_shipping = "free_shipping"
    bogo = "bogo"
    tiered = "tiered"


class TierDiscountType(str, enum.Enum):
    percentage = "percentage"
    fixed = "fixed"


class CouponScope(str, enum.Enum):
    all = "all"
    specific_products = "specific_products"
    categories = "categories"


@dataclass(frozen=True)
class DiscountTier:
    min_amount: Decimal
    discount_type: TierDiscountType
    discount_value: Decimal


@dataclass(frozen=True)
class Coupon:
    code: str
    discount_type: DiscountType
    valid_from: datetime
    discount_value: Decimal = Decimal("0")
    applies_to: CouponScope = CouponScope.all
    product_ids: frozenset[str] = frozenset()
    category_ids: frozenset[str] = frozenset()
    valid_until: datetime | None = None
    max_uses: int | None = None
    uses_count: int = 0
    minimum_purchase: Decimal | None = None
    bogo_buy_quantity: int = 1
    bogo_get_quantity: int = 1
    bogo_get_discount_percentage: Decimal = Decimal("100")
    discount_tiers: tuple[DiscountTier, ...] = field(default_factory=tuple)
    active: bool = True
