from __future__ import annotations

import json
import logging
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# Structured fields passed through ``extra=`` by the engine's loggers.
_HTTP_FIELDS = ("path", "method", "status_code", "duration_ms")
_PRICING_FIELDS = ("coupon_code", "reason", "vertices")


class RequestIdFilter(logging.Filter):
    """Attach request_id from contextvars to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        record.request_id = request_id_ctx_var.get() or "-"
        return True


def _base_log_record_payload(record: logging.LogRecord) -> dict[str, Any]:
    ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
    return {
        "ts": ts,
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
        "request_id": getattr(record, "request_id", "-"),
    }


def _append_fields(payload: dict[str, Any], record: logging.LogRecord, fields: tuple[str, ...]) -> None:
    for field in fields:
        value = getattr(record, field, None)
        if value is None:
            continue
        payload[field] = value if isinstance(value, (int, float, bool, str)) else str(value)


def _append_http_fields(payload: dict[str, Any], record: logging.LogRecord) -> None:
    _append_fields(payload, record, _HTTP_FIELDS)


def _append_pricing_fields(payload: dict[str, Any], record: logging.LogRecord) -> None:
    _append_fields(payload, record, _PRICING_FIELDS)


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        base = _base_log_record_payload(record)
        _append_http_fields(base, record)
        _append_pricing_fields(base, record)
        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def configure_logging(json_logs: bool = False) -> None:
    """Configure root logger with request-id aware formatter."""
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s")
        )

    logging.basicConfig(level=logging.INFO, handlers=[handler], force=True)
