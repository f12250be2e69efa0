from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Mapping

from checkout_engine.models.cart import Cart
from checkout_engine.models.coupon import Coupon
from checkout_engine.models.shipping import DeliveryLocation, ProductShipping, ShippingConfig
from checkout_engine.services import coupons as coupon_service
from checkout_engine.services import shipping as shipping_service
from checkout_engine.services.coupons import CategoryLookup, CouponError
from checkout_engine.services.pricing import ZERO, quantize_money


@dataclass(frozen=True)
class ShippingInputs:
    zone: DeliveryLocation
    config: ShippingConfig
    overrides: Mapping[str, ProductShipping] = field(default_factory=dict)


@dataclass(frozen=True)
class Quote:
    subtotal: Decimal
    discount_amount: Decimal
    shipping_charge: Decimal
    is_free_shipping: bool
    total: Decimal


@dataclass(frozen=True)
class CheckoutQuote:
    quote: Quote
    coupon_error: CouponError | None = None
    applied_code: str | None = None


def quote(
    cart: Cart,
    coupon: Coupon | None,
    shipping: ShippingInputs | None,
    *,
    now: datetime,
    category_lookup: CategoryLookup | None = None,
) -> CheckoutQuote:
    """Price ``cart`` from scratch.

    A rejected coupon does not block the quote: it is priced as if no coupon
    were given and the rejection is returned alongside, leaving the caller to
    decide whether checkout may proceed. ``shipping`` is ``None`` until the
    customer picks a delivery location.
    """
    subtotal = coupon_service.cart_subtotal(cart)
    discount = ZERO
    free_shipping = False
    coupon_error: CouponError | None = None
    applied_code: str | None = None

    if coupon is not None:
        result = coupon_service.resolve_coupon(cart, coupon, now, category_lookup)
        if result.outcome is not None:
            discount = result.outcome.discount_amount
            free_shipping = result.outcome.free_shipping
            applied_code = result.outcome.applied_code
        else:
            coupon_error = result.error

    shipping_charge = ZERO
    if shipping is not None and not free_shipping:
        shipping_charge = shipping_service.compute_shipping(cart, shipping.zone, shipping.overrides, shipping.config)

    total = subtotal - discount + shipping_charge
    if total < 0:
        total = ZERO
    return CheckoutQuote(
        quote=Quote(
            subtotal=subtotal,
            discount_amount=discount,
            shipping_charge=shipping_charge,
            is_free_shipping=free_shipping,
            total=quantize_money(total),
        ),
        coupon_error=coupon_error,
        applied_code=applied_code,
    )
