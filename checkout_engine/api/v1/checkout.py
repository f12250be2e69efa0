from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status

from checkout_engine.core import metrics
from checkout_engine.models.cart import CartLine
from checkout_engine.models.coupon import Coupon
from checkout_engine.schemas.checkout import (
    CartLineIn,
    CouponErrorRead,
    CouponIn,
    CouponValidateRequest,
    CouponValidateResponse,
    PaymentTermsRead,
    QuoteRequest,
    QuoteResponse,
    ShippingIn,
    ShippingQuoteRequest,
    ShippingQuoteResponse,
)
from checkout_engine.services import checkout as checkout_service
from checkout_engine.services import coupons as coupon_service
from checkout_engine.services import payment_terms as payment_terms_service
from checkout_engine.services import shipping as shipping_service
from checkout_engine.services import store_settings
from checkout_engine.services.coupons import CouponError

router = APIRouter(tags=["checkout"])


def _cart(items: list[CartLineIn]) -> list[CartLine]:
    return [
        CartLine(
            product_id=item.product_id,
            category_id=item.category_id,
            unit_price=item.unit_price,
            quantity=item.quantity,
        )
        for item in items
    ]


def _coupon(payload: CouponIn) -> Coupon:
    return store_settings.coupon_from_row(payload.model_dump(mode="json"))


def _shipping_inputs(payload: ShippingIn) -> checkout_service.ShippingInputs:
    config = store_settings.shipping_config_from_row(payload.store.model_dump(mode="json"))
    overrides = store_settings.shipping_overrides_from_rows(p.model_dump(mode="json") for p in payload.products)
    zone = shipping_service.resolve_zone_label(payload.zone, config)
    return checkout_service.ShippingInputs(zone=zone, config=config, overrides=overrides)


def _error_read(error: CouponError | None) -> CouponErrorRead | None:
    if error is None:
        return None
    return CouponErrorRead(code=error.value, message=error.message)


def _bad_request(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("/checkout/quote", response_model=QuoteResponse)
def quote_cart(payload: QuoteRequest) -> QuoteResponse:
    now = payload.now or datetime.now(timezone.utc)
    try:
        cart = _cart(payload.items)
        coupon = _coupon(payload.coupon) if payload.coupon is not None else None
        shipping = _shipping_inputs(payload.shipping) if payload.shipping is not None else None
        payment_settings = [store_settings.product_payment_from_row(p.model_dump(mode="json")) for p in payload.payment_settings]
        result = checkout_service.quote(cart, coupon, shipping, now=now, category_lookup=payload.category_map.get)
    except ValueError as exc:
        raise _bad_request(exc) from exc

    metrics.record_quote_computed()
    if result.coupon_error is not None:
        metrics.record_coupon_rejected(result.coupon_error.value)
    elif result.applied_code is not None:
        metrics.record_coupon_applied()

    terms = payment_terms_service.compute_payment_terms(payment_settings, result.quote.total)
    return QuoteResponse(
        subtotal=result.quote.subtotal,
        discount_amount=result.quote.discount_amount,
        shipping_charge=result.quote.shipping_charge,
        is_free_shipping=result.quote.is_free_shipping,
        total=result.quote.total,
        applied_code=result.applied_code,
        coupon_error=_error_read(result.coupon_error),
        payment_terms=PaymentTermsRead(
            requires_full_payment=terms.requires_full_payment,
            allows_cod=terms.allows_cod,
            minimum_payment_percentage=terms.minimum_payment_percentage,
            minimum_payment_amount=terms.minimum_payment_amount,
        ),
    )


@router.post("/coupons/validate", response_model=CouponValidateResponse)
def validate_coupon(payload: CouponValidateRequest) -> CouponValidateResponse:
    now = payload.now or datetime.now(timezone.utc)
    try:
        result = coupon_service.resolve_coupon(
            _cart(payload.items), _coupon(payload.coupon), now, payload.category_map.get
        )
    except ValueError as exc:
        raise _bad_request(exc) from exc

    if result.outcome is None:
        metrics.record_coupon_rejected(result.error.value if result.error else "unknown")
        return CouponValidateResponse(valid=False, error=_error_read(result.error))
    return CouponValidateResponse(
        valid=True,
        discount_amount=result.outcome.discount_amount,
        free_shipping=result.outcome.free_shipping,
        applied_code=result.outcome.applied_code,
    )


@router.post("/shipping/quote", response_model=ShippingQuoteResponse)
def quote_shipping(payload: ShippingQuoteRequest) -> ShippingQuoteResponse:
    try:
        inputs = _shipping_inputs(payload.shipping)
        charge = shipping_service.compute_shipping(_cart(payload.items), inputs.zone, inputs.overrides, inputs.config)
    except ValueError as exc:
        raise _bad_request(exc) from exc
    return ShippingQuoteResponse(
        zone=inputs.zone.value,
        shipping_charge=charge,
        return_charge=shipping_service.return_charge(inputs.config),
    )
