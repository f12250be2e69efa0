from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_UP
from typing import Literal

from checkout_engine.core.config import settings


MONEY_QUANT = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyRounding = Literal["half_up", "half_even", "up", "down"]


_ROUNDING_MAP: dict[str, str] = {
    "half_up": ROUND_HALF_UP,
    "half_even": ROUND_HALF_EVEN,
    "up": ROUND_UP,
    "down": ROUND_DOWN,
}


def quantize_money(value: Decimal, *, rounding: MoneyRounding | None = None) -> Decimal:
    mode = _ROUNDING_MAP.get(str(rounding or settings.money_rounding), ROUND_HALF_UP)
    try:
        return Decimal(value).quantize(MONEY_QUANT, rounding=mode)
    except InvalidOperation as exc:
        raise ValueError(f"Amount cannot be represented in cents: {value}") from exc


def clamp_money(value: Decimal, *, upper: Decimal | None = None) -> Decimal:
    """Clamp ``value`` into ``[0, upper]`` (no upper bound when ``upper`` is None)."""
    if value < 0:
        return ZERO
    if upper is not None and value > upper:
        return upper
    return value


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return Decimal(amount) * Decimal(percent) / Decimal("100")
