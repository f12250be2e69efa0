from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from checkout_engine.models.payment import ProductPaymentSettings
from checkout_engine.services.pricing import ZERO, percent_of, quantize_money


class PartialPaymentError(str, enum.Enum):
    full_payment_required = "full_payment_required"
    not_positive = "not_positive"
    below_minimum = "below_minimum"
    exceeds_total = "exceeds_total"


@dataclass(frozen=True)
class PaymentTerms:
    total: Decimal
    requires_full_payment: bool
    allows_cod: bool
    minimum_payment_percentage: Decimal
    minimum_payment_amount: Decimal


def compute_payment_terms(products: Sequence[ProductPaymentSettings], total: Decimal) -> PaymentTerms:
    """Combine per-product payment rules into the options offered for a cart.

    Full payment is mandatory only when every product demands it; one product
    accepting cash on delivery is enough to offer it; the strictest advance
    percentage wins.
    """
    requires_full = bool(products) and all(p.requires_full_payment for p in products)
    allows_cod = any(p.allows_cod for p in products)
    pct = max((Decimal(p.minimum_payment_percentage or 0) for p in products), default=ZERO)
    if pct < 0:
        pct = ZERO
    total = quantize_money(total)
    return PaymentTerms(
        total=total,
        requires_full_payment=requires_full,
        allows_cod=allows_cod,
        minimum_payment_percentage=pct,
        minimum_payment_amount=quantize_money(percent_of(total, pct)),
    )


def validate_partial_payment(amount: Decimal, terms: PaymentTerms) -> PartialPaymentError | None:
    if terms.requires_full_payment:
        return PartialPaymentError.full_payment_required
    if amount <= 0:
        return PartialPaymentError.not_positive
    if amount < terms.minimum_payment_amount:
        return PartialPaymentError.below_minimum
    if amount > terms.total:
        return PartialPaymentError.exceeds_total
    return None
