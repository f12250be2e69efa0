from decimal import Decimal

import pytest

from checkout_engine.core.config import settings
from checkout_engine.services import pricing


def test_quantize_money_rounding_modes() -> None:
    assert pricing.quantize_money(Decimal("1.005"), rounding="half_up") == Decimal("1.01")
    assert pricing.quantize_money(Decimal("1.005"), rounding="half_even") == Decimal("1.00")
    assert pricing.quantize_money(Decimal("1.015"), rounding="half_even") == Decimal("1.02")
    assert pricing.quantize_money(Decimal("1.001"), rounding="up") == Decimal("1.01")
    assert pricing.quantize_money(Decimal("1.009"), rounding="down") == Decimal("1.00")


def test_quantize_money_uses_configured_rounding(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "money_rounding", "down")
    assert pricing.quantize_money(Decimal("2.499")) == Decimal("2.49")


def test_clamp_money_bounds() -> None:
    assert pricing.clamp_money(Decimal("-3")) == Decimal("0.00")
    assert pricing.clamp_money(Decimal("12"), upper=Decimal("10")) == Decimal("10")
    assert pricing.clamp_money(Decimal("7"), upper=Decimal("10")) == Decimal("7")


def test_quantize_money_rejects_amounts_too_large_for_cents() -> None:
    with pytest.raises(ValueError):
        pricing.quantize_money(Decimal("1e30"))
