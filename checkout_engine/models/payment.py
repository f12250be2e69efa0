from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ProductPaymentSettings:
    requires_full_payment: bool = False
    allows_cod: bool = False
    minimum_payment_percentage: Decimal = Decimal("0")
