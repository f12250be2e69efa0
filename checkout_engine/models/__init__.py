from checkout_engine.models.cart import Cart, CartLine  # noqa: F401
from checkout_engine.models.coupon import (  # noqa: F401
    Coupon,
    CouponScope,
    DiscountTier,
    DiscountType,
    TierDiscountType,
)
from checkout_engine.models.delivery import (  # noqa: F401
    DeliveryAreaSettings,
    DeliveryAreaType,
    DeliveryZone,
    GeoPoint,
    LocationFailure,
    ZoneMethod,
)
from checkout_engine.models.payment import ProductPaymentSettings  # noqa: F401
from checkout_engine.models.shipping import (  # noqa: F401
    DeliveryLocation,
    ProductShipping,
    ShippingAreaMode,
    ShippingCalculationMethod,
    ShippingConfig,
)

__all__ = [
    "Cart",
    "CartLine",
    "Coupon",
    "CouponScope",
    "DiscountTier",
    "DiscountType",
    "TierDiscountType",
    "DeliveryAreaSettings",
    "DeliveryAreaType",
    "DeliveryZone",
    "GeoPoint",
    "LocationFailure",
    "ZoneMethod",
    "ProductPaymentSettings",
    "DeliveryLocation",
    "ProductShipping",
    "ShippingAreaMode",
    "ShippingCalculationMethod",
    "ShippingConfig",
]
