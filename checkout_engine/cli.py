import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from checkout_engine.models.delivery import GeoPoint, LocationFailure
from checkout_engine.services import checkout as checkout_service
from checkout_engine.services import delivery as delivery_service
from checkout_engine.services import payment_terms as payment_terms_service
from checkout_engine.services import shipping as shipping_service
from checkout_engine.services import store_settings


def _load_json(raw_path: str) -> Dict[str, Any]:
    path = Path((raw_path or "").strip())
    if not path.is_file():
        raise SystemExit(f"Input file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SystemExit(f"Expected a JSON object in {path}")
    return data


def _parse_now(raw: str | None) -> datetime:
    if not raw:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as exc:
        raise SystemExit(f"Invalid --now timestamp: {raw}") from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _print(payload: Dict[str, Any]) -> None:
    json.dump(payload, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def run_quote(document: Dict[str, Any], *, now: datetime) -> Dict[str, Any]:
    """Price the order described by ``document``.

    The document carries the already-loaded rows: ``items``, an optional
    ``coupon`` row, the ``store`` row, the chosen ``zone``, per-product
    ``products`` rows (shipping overrides and payment settings) and an
    optional ``categories`` map of product id to category id.
    """
    cart = store_settings.cart_from_rows(document.get("items") or [])
    coupon_row = document.get("coupon")
    coupon = store_settings.coupon_from_row(coupon_row) if coupon_row else None
    store_row = document.get("store") or {}
    product_rows = document.get("products") or []
    categories: Dict[str, str] = {str(k): str(v) for k, v in (document.get("categories") or {}).items()}

    shipping = None
    if document.get("zone"):
        config = store_settings.shipping_config_from_row(store_row)
        shipping = checkout_service.ShippingInputs(
            zone=shipping_service.resolve_zone_label(str(document["zone"]), config),
            config=config,
            overrides=store_settings.shipping_overrides_from_rows(product_rows),
        )

    result = checkout_service.quote(cart, coupon, shipping, now=now, category_lookup=categories.get)
    terms = payment_terms_service.compute_payment_terms(
        [store_settings.product_payment_from_row(row) for row in product_rows],
        result.quote.total,
    )
    return {
        "subtotal": str(result.quote.subtotal),
        "discount_amount": str(result.quote.discount_amount),
        "shipping_charge": str(result.quote.shipping_charge),
        "is_free_shipping": result.quote.is_free_shipping,
        "total": str(result.quote.total),
        "applied_code": result.applied_code,
        "coupon_error": result.coupon_error.value if result.coupon_error else None,
        "minimum_payment_amount": str(terms.minimum_payment_amount),
        "allows_cod": terms.allows_cod,
        "requires_full_payment": terms.requires_full_payment,
    }


def run_zone_check(document: Dict[str, Any], *, location: GeoPoint | LocationFailure | None, country: str | None) -> Dict[str, Any]:
    area = store_settings.delivery_area_from_row(document.get("store") or document)
    result = delivery_service.check_delivery(area, location, country_code=country)
    return {
        "status": result.status.value,
        "allowed": result.allowed,
        "distance_km": result.distance_km,
        "location_failure": result.location_failure.value if result.location_failure else None,
    }


def _add_quote_command(subparsers) -> None:
    quote = subparsers.add_parser("quote", help="Price a cart described by a JSON document")
    quote.add_argument("input", help="Input JSON path")
    quote.add_argument("--now", help="Evaluation time (ISO 8601, defaults to the current UTC time)")


def _add_zone_command(subparsers) -> None:
    zone = subparsers.add_parser("zone-check", help="Check whether a store delivers to a location")
    zone.add_argument("input", help="Store JSON path")
    zone.add_argument("--lat", type=float, help="Customer latitude")
    zone.add_argument("--lng", type=float, help="Customer longitude")
    zone.add_argument("--country", help="Customer ISO country code")
    zone.add_argument(
        "--location-error",
        choices=[f.value for f in LocationFailure],
        help="Report a geolocation failure instead of coordinates",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="checkout-engine", description="Checkout pricing utilities")
    subparsers = parser.add_subparsers(dest="command")
    _add_quote_command(subparsers)
    _add_zone_command(subparsers)
    return parser


def _zone_location(args: argparse.Namespace) -> GeoPoint | LocationFailure | None:
    if args.location_error:
        return LocationFailure(args.location_error)
    if args.lat is None and args.lng is None:
        return None
    if args.lat is None or args.lng is None:
        raise SystemExit("--lat and --lng must be given together")
    return GeoPoint(lat=args.lat, lng=args.lng)


def _run_cli_command(args: argparse.Namespace) -> bool:
    try:
        if args.command == "quote":
            _print(run_quote(_load_json(args.input), now=_parse_now(args.now)))
            return True
        if args.command == "zone-check":
            _print(run_zone_check(_load_json(args.input), location=_zone_location(args), country=args.country))
            return True
    except ValueError as exc:
        raise SystemExit(f"error: {exc}") from exc
    return False


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not _run_cli_command(args):
        parser.print_help()


if __name__ == "__main__":
    main()
