from collections import Counter
from threading import Lock
from typing import Dict, Counter as CounterType

_metrics: CounterType[str] = Counter()
_lock = Lock()


def _inc(key: str) -> None:
    with _lock:
        _metrics[key] += 1


def record_quote_computed() -> None:
    _inc("quotes_computed")


def record_coupon_applied() -> None:
    _inc("coupons_applied")


def record_coupon_rejected(reason: str) -> None:
    _inc("coupons_rejected")
    _inc(f"coupons_rejected.{reason}")


def record_delivery_check(status: str) -> None:
    _inc(f"delivery_checks.{status}")


def snapshot() -> Dict[str, int]:
    with _lock:
        return dict(_metrics)


def reset() -> None:
    with _lock:
        _metrics.clear()
