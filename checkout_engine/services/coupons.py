from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from checkout_engine.models.cart import Cart, CartLine
from checkout_engine.models.coupon import Coupon, CouponScope, DiscountTier, DiscountType, TierDiscountType
from checkout_engine.services.pricing import ZERO, clamp_money, percent_of, quantize_money

logger = logging.getLogger(__name__)

CategoryLookup = Callable[[str], str | None]


class InvalidCouponConfigError(ValueError):
    pass


class CouponError(str, enum.Enum):
    inactive = "inactive"
    not_yet_valid = "not_yet_valid"
    expired = "expired"
    usage_limit_reached = "usage_limit_reached"
    below_minimum_purchase = "below_minimum_purchase"
    not_applicable_to_cart = "not_applicable_to_cart"

    @property
    def message(self) -> str:
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES: dict[CouponError, str] = {
    CouponError.inactive: "Invalid or expired coupon code",
    CouponError.not_yet_valid: "This coupon is not yet valid",
    CouponError.expired: "This coupon has expired",
    CouponError.usage_limit_reached: "This coupon has reached its usage limit",
    CouponError.below_minimum_purchase: "Minimum purchase not reached for this coupon",
    CouponError.not_applicable_to_cart: "This coupon does not apply to items in your cart",
}


@dataclass(frozen=True)
class DiscountOutcome:
    discount_amount: Decimal
    free_shipping: bool
    applied_code: str


@dataclass(frozen=True)
class CouponResult:
    outcome: DiscountOutcome | None = None
    error: CouponError | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is not None


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def cart_subtotal(cart: Cart) -> Decimal:
    return quantize_money(sum((line.line_total for line in cart), start=ZERO))


def _line_category(line: CartLine, category_lookup: CategoryLookup | None) -> str | None:
    if line.category_id is not None:
        return line.category_id
    if category_lookup is None:
        return None
    return category_lookup(line.product_id)


def eligible_lines(cart: Cart, coupon: Coupon, category_lookup: CategoryLookup | None = None) -> list[CartLine]:
    if coupon.applies_to == CouponScope.all:
        return list(cart)
    if coupon.applies_to == CouponScope.specific_products:
        return [line for line in cart if line.product_id in coupon.product_ids]
    if coupon.applies_to == CouponScope.categories:
        return [line for line in cart if _line_category(line, category_lookup) in coupon.category_ids]
    raise InvalidCouponConfigError(f"Unknown coupon scope: {coupon.applies_to!r}")


def _validation_error(coupon: Coupon, now: datetime, subtotal: Decimal) -> CouponError | None:
    if not coupon.active:
        return CouponError.inactive
    now = _as_utc(now)
    if now < _as_utc(coupon.valid_from):
        return CouponError.not_yet_valid
    if coupon.valid_until is not None and now > _as_utc(coupon.valid_until):
        return CouponError.expired
    if coupon.max_uses is not None and coupon.uses_count >= coupon.max_uses:
        return CouponError.usage_limit_reached
    if coupon.minimum_purchase is not None and subtotal < Decimal(coupon.minimum_purchase):
        return CouponError.below_minimum_purchase
    return None


def _bogo_discount(lines: list[CartLine], coupon: Coupon) -> Decimal:
    buy_qty = int(coupon.bogo_buy_quantity)
    get_qty = int(coupon.bogo_get_quantity)
    if buy_qty < 1 or get_qty < 1:
        raise InvalidCouponConfigError(f"BOGO coupon {coupon.code} needs buy and get quantities of at least 1")
    pct = Decimal(coupon.bogo_get_discount_percentage)
    if pct < 0 or pct > 100:
        raise InvalidCouponConfigError(f"BOGO coupon {coupon.code} has an invalid discount percentage")
    discount = ZERO
    for line in lines:
        free_sets = int(line.quantity) // (buy_qty + get_qty)
        free_units = free_sets * get_qty
        discount += percent_of(Decimal(line.unit_price) * free_units, pct)
    return discount


def select_tier(tiers: tuple[DiscountTier, ...], eligible_subtotal: Decimal) -> DiscountTier | None:
    # Highest qualifying threshold wins, even when a lower tier would discount more.
    for tier in sorted(tiers, key=lambda t: Decimal(t.min_amount), reverse=True):
        if Decimal(tier.min_amount) <= eligible_subtotal:
            return tier
    return None


def _tier_discount(tier: DiscountTier, eligible_subtotal: Decimal) -> Decimal:
    if tier.discount_type == TierDiscountType.percentage:
        return percent_of(eligible_subtotal, tier.discount_value)
    if tier.discount_type == TierDiscountType.fixed:
        return Decimal(tier.discount_value)
    raise InvalidCouponConfigError(f"Unsupported tier discount type: {tier.discount_type!r}")


def _raw_discount(coupon: Coupon, lines: list[CartLine]) -> Decimal:
    eligible_subtotal = sum((line.line_total for line in lines), start=ZERO)
    if coupon.discount_type == DiscountType.percentage:
        return percent_of(eligible_subtotal, coupon.discount_value)
    if coupon.discount_type == DiscountType.fixed:
        return Decimal(coupon.discount_value)
    if coupon.discount_type == DiscountType.bogo:
        return _bogo_discount(lines, coupon)
    if coupon.discount_type == DiscountType.tiered:
        tier = select_tier(coupon.discount_tiers, eligible_subtotal)
        return _tier_discount(tier, eligible_subtotal) if tier is not None else ZERO
    raise InvalidCouponConfigError(f"Unknown discount type: {coupon.discount_type!r}")


def resolve_coupon(
    cart: Cart,
    coupon: Coupon,
    now: datetime,
    category_lookup: CategoryLookup | None = None,
) -> CouponResult:
    """Validate ``coupon`` against ``cart`` and compute its discount.

    Checks run in a fixed order and the first failure is reported, so the
    customer always sees the same message for the same coupon state. Business
    rejections come back as ``CouponResult.error``; only malformed coupon data
    raises. ``coupon.uses_count`` is read, never incremented.
    """
    subtotal = cart_subtotal(cart)
    error = _validation_error(coupon, now, subtotal)
    lines: list[CartLine] = []
    if error is None:
        lines = eligible_lines(cart, coupon, category_lookup)
        if not lines:
            error = CouponError.not_applicable_to_cart
    if error is not None:
        logger.info("coupon_rejected", extra={"coupon_code": coupon.code, "reason": error.value})
        return CouponResult(error=error)

    code = normalize_code(coupon.code)
    if coupon.discount_type == DiscountType.free_shipping:
        return CouponResult(outcome=DiscountOutcome(discount_amount=ZERO, free_shipping=True, applied_code=code))

    discount = clamp_money(quantize_money(_raw_discount(coupon, lines)), upper=subtotal)
    return CouponResult(outcome=DiscountOutcome(discount_amount=discount, free_shipping=False, applied_code=code))
