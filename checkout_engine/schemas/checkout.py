from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from checkout_engine.models.coupon import CouponScope, DiscountType, TierDiscountType
from checkout_engine.models.shipping import ShippingAreaMode, ShippingCalculationMethod


class CartLineIn(BaseModel):
    product_id: str = Field(min_length=1, max_length=64)
    category_id: str | None = Field(default=None, max_length=64)
    unit_price: Decimal = Field(ge=0, max_digits=18, decimal_places=4)
    quantity: int = Field(ge=1, le=100_000)


class DiscountTierIn(BaseModel):
    min_amount: Decimal = Field(ge=0, max_digits=18, decimal_places=4)
    discount_type: TierDiscountType = TierDiscountType.percentage
    discount_value: Decimal = Field(ge=0, max_digits=18, decimal_places=4)


class CouponIn(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    discount_type: DiscountType
    discount_value: Decimal = Field(default=Decimal("0"), ge=0, max_digits=18, decimal_places=4)
    applies_to: CouponScope = CouponScope.all
    product_ids: list[str] = []
    category_ids: list[str] = []
    valid_from: datetime
    valid_until: datetime | None = None
    max_uses: int | None = Field(default=None, ge=0)
    uses_count: int = Field(default=0, ge=0)
    minimum_purchase: Decimal | None = Field(default=None, ge=0, max_digits=18, decimal_places=4)
    bogo_buy_quantity: int = Field(default=1, ge=1)
    bogo_get_quantity: int = Field(default=1, ge=1)
    bogo_get_discount_percentage: Decimal = Field(default=Decimal("100"), ge=0, le=100)
    discount_tiers: list[DiscountTierIn] = []
    is_active: bool = True


class ProductShippingIn(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    shipping_inside: Decimal | None = Field(default=None, ge=0, max_digits=18, decimal_places=4)
    shipping_outside: Decimal | None = Field(default=None, ge=0, max_digits=18, decimal_places=4)


class StoreShippingIn(BaseModel):
    shipping_area_mode: ShippingAreaMode = ShippingAreaMode.both
    default_shipping_inside: Decimal | None = Field(default=None, ge=0, max_digits=18, decimal_places=4)
    default_shipping_outside: Decimal | None = Field(default=None, ge=0, max_digits=18, decimal_places=4)
    shipping_calculation_method: ShippingCalculationMethod = ShippingCalculationMethod.flat_rate
    default_return_charge: Decimal | None = Field(default=None, ge=0, max_digits=18, decimal_places=4)


class ShippingIn(BaseModel):
    zone: str = Field(min_length=1, max_length=32, description="Delivery location label, e.g. inside or outside")
    store: StoreShippingIn = StoreShippingIn()
    products: list[ProductShippingIn] = []


class ProductPaymentIn(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    requires_full_payment: bool = False
    allows_cod: bool = False
    minimum_payment_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class CouponErrorRead(BaseModel):
    code: str
    message: str


class QuoteRequest(BaseModel):
    items: list[CartLineIn] = []
    coupon: CouponIn | None = None
    shipping: ShippingIn | None = None
    payment_settings: list[ProductPaymentIn] = []
    category_map: dict[str, str] = Field(default_factory=dict, description="product_id -> category_id")
    now: datetime | None = None


class PaymentTermsRead(BaseModel):
    requires_full_payment: bool
    allows_cod: bool
    minimum_payment_percentage: Decimal
    minimum_payment_amount: Decimal


class QuoteResponse(BaseModel):
    subtotal: Decimal
    discount_amount: Decimal
    shipping_charge: Decimal
    is_free_shipping: bool
    total: Decimal
    applied_code: str | None = None
    coupon_error: CouponErrorRead | None = None
    payment_terms: PaymentTermsRead


class CouponValidateRequest(BaseModel):
    items: list[CartLineIn] = Field(min_length=1)
    coupon: CouponIn
    category_map: dict[str, str] = Field(default_factory=dict)
    now: datetime | None = None


class CouponValidateResponse(BaseModel):
    valid: bool
    discount_amount: Decimal = Decimal("0.00")
    free_shipping: bool = False
    applied_code: str | None = None
    error: CouponErrorRead | None = None


class ShippingQuoteRequest(BaseModel):
    items: list[CartLineIn] = []
    shipping: ShippingIn


class ShippingQuoteResponse(BaseModel):
    zone: str
    shipping_charge: Decimal
    return_charge: Decimal
