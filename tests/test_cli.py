import json
from pathlib import Path

import pytest

from checkout_engine import cli


def _write(tmp_path: Path, name: str, data: object) -> str:
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def _output(capsys: pytest.CaptureFixture[str]) -> dict:
    return json.loads(capsys.readouterr().out)


ORDER = {
    "items": [{"product_id": "p1", "unit_price": "250", "quantity": 2}],
    "coupon": {
        "code": "save10",
        "discount_type": "percentage",
        "discount_value": "10",
        "minimum_purchase": "200",
        "valid_from": "2026-01-01T00:00:00Z",
    },
    "store": {"default_shipping_outside": "60", "shipping_calculation_method": "flat_rate"},
    "zone": "outside",
    "products": [{"id": "p1", "allows_cod": True, "minimum_payment_percentage": "10"}],
}


def test_quote_command(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["quote", _write(tmp_path, "order.json", ORDER), "--now", "2026-01-15T12:00:00Z"])
    out = _output(capsys)
    assert out["subtotal"] == "500.00"
    assert out["discount_amount"] == "50.00"
    assert out["shipping_charge"] == "60.00"
    assert out["total"] == "510.00"
    assert out["applied_code"] == "SAVE10"
    assert out["coupon_error"] is None
    assert out["minimum_payment_amount"] == "51.00"
    assert out["allows_cod"] is True


def test_quote_command_reports_coupon_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(["quote", _write(tmp_path, "order.json", ORDER), "--now", "2025-12-31T23:59:59Z"])
    out = _output(capsys)
    assert out["coupon_error"] == "not_yet_valid"
    assert out["total"] == "560.00"


def test_quote_command_rejects_bad_store_data(tmp_path: Path) -> None:
    order = {**ORDER, "store": {"shipping_calculation_method": "by_weight"}}
    with pytest.raises(SystemExit, match="shipping_calculation_method"):
        cli.main(["quote", _write(tmp_path, "order.json", order)])


def test_missing_input_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="not found"):
        cli.main(["quote", str(tmp_path / "missing.json")])


def test_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SystemExit, match="Invalid JSON"):
        cli.main(["quote", str(path)])


def test_zone_check_command(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    store = {
        "delivery_area_type": "map",
        "delivery_zone_coordinates": {"lat": 23.8103, "lng": 90.4125},
        "delivery_zone_radius": 5,
    }
    path = _write(tmp_path, "store.json", {"store": store})

    cli.main(["zone-check", path, "--lat", "23.8103", "--lng", "90.4125"])
    out = _output(capsys)
    assert out["status"] == "available"
    assert out["allowed"] is True

    cli.main(["zone-check", path, "--location-error", "timeout"])
    out = _output(capsys)
    assert out["status"] == "location_unavailable"
    assert out["location_failure"] == "timeout"


def test_zone_check_needs_both_coordinates(tmp_path: Path) -> None:
    path = _write(tmp_path, "store.json", {"delivery_area_type": "map"})
    with pytest.raises(SystemExit, match="--lat and --lng"):
        cli.main(["zone-check", path, "--lat", "1"])


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    cli.main([])
    assert "checkout-engine" in capsys.readouterr().out


def test_quote_command_rejects_non_finite_store_charge(tmp_path: Path) -> None:
    order = {**ORDER, "store": {"default_shipping_outside": "NaN"}}
    with pytest.raises(SystemExit, match="finite"):
        cli.main(["quote", _write(tmp_path, "order.json", order)])


def test_quote_command_rejects_price_too_large_for_cents(tmp_path: Path) -> None:
    order = {**ORDER, "coupon": None, "items": [{"product_id": "p1", "unit_price": "1e30", "quantity": 1}]}
    with pytest.raises(SystemExit, match="cents"):
        cli.main(["quote", _write(tmp_path, "order.json", order)])
