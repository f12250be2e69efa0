from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence


@dataclass(frozen=True)
class CartLine:
    product_id: str
    unit_price: Decimal
    quantity: int
    category_id: str | None = None

    def __post_init__(self) -> None:
        if not self.product_id:
            raise ValueError("Cart line requires a product id")
        price = Decimal(self.unit_price)
        if not price.is_finite() or price < 0:
            raise ValueError(f"Unit price must be a finite non-negative amount (product {self.product_id})")
        if isinstance(self.quantity, bool) or int(self.quantity) < 1:
            raise ValueError(f"Quantity must be a positive integer (product {self.product_id})")

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.unit_price) * int(self.quantity)


Cart = Sequence[CartLine]
