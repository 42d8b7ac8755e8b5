# payments/services/razorpay.py
"""
Razorpay REST client (urllib, no SDK).

- create_gateway_order(): POST /v1/orders (amount in paise)
- fetch_payment():        GET  /v1/payments/<id>
- verify_payment_signature(): HMAC-SHA256(key_secret, "<order_id>|<payment_id>")
- verify_webhook_signature(): HMAC-SHA256(webhook_secret, raw_body)

All transport / provider failures raise GatewayError; missing keys raise
GatewayNotConfiguredError. Secrets are never logged.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings

from payments.services.exceptions import GatewayError, GatewayNotConfiguredError

logger = logging.getLogger(__name__)

RAZORPAY_BASE = "https://api.razorpay.com/v1"


def _razorpay_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = payments.get("RAZORPAY") if isinstance(payments, dict) else None
    return cfg if isinstance(cfg, dict) else {}


def _timeout() -> float:
    cfg = getattr(settings, "TAILORTRACK", {}) or {}
    return float(cfg.get("OUTBOUND_HTTP_TIMEOUT") or 25)


def key_id() -> str:
    return (_razorpay_cfg().get("KEY_ID") or "").strip()


def _key_secret() -> str:
    return (_razorpay_cfg().get("KEY_SECRET") or "").strip()


def _webhook_secret() -> str:
    return (_razorpay_cfg().get("WEBHOOK_SECRET") or "").strip()


def gateway_currency() -> str:
    cfg = getattr(settings, "TAILORTRACK", {}) or {}
    return (cfg.get("CURRENCY") or "INR").strip().upper()


def to_paise(amount) -> int:
    try:
        rupees = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError("amount must be a valid Decimal") from exc
    return int((rupees * Decimal("100")).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_paise(paise) -> Decimal:
    try:
        return (Decimal(str(int(paise))) / Decimal("100")).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise GatewayError(f"Invalid amount from gateway: {paise!r}") from exc


def _request_json(method: str, path: str, *, body: dict | None = None) -> dict[str, Any]:
    kid, secret = key_id(), _key_secret()
    if not kid or not secret:
        raise GatewayNotConfiguredError("Razorpay keys are not configured")

    credentials = base64.b64encode(f"{kid}:{secret}".encode("utf-8")).decode("ascii")
    data = json.dumps(body).encode("utf-8") if body is not None else None

    req = Request(
        f"{RAZORPAY_BASE}{path}",
        data=data,
        headers={
            "Authorization": f"Basic {credentials}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        method=method,
    )

    try:
        with urlopen(req, timeout=_timeout()) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        try:
            parsed = json.loads(e.read().decode("utf-8", errors="replace") or "{}")
        except ValueError:
            parsed = {}
        error = parsed.get("error") if isinstance(parsed, dict) else None
        msg = error.get("description") if isinstance(error, dict) else None
        raise GatewayError(f"Razorpay HTTPError: {e.code} {msg or e.reason}") from e
    except URLError as e:
        raise GatewayError(f"Razorpay URLError: {e.reason}") from e
    except TimeoutError as e:
        raise GatewayError("Razorpay request timed out") from e

    try:
        parsed = json.loads(raw)
    except ValueError as e:
        raise GatewayError("Razorpay returned non-JSON") from e
    if not isinstance(parsed, dict):
        raise GatewayError("Razorpay returned an unexpected payload")
    return parsed


def create_gateway_order(*, amount, receipt: str, notes: dict | None = None) -> dict:
    payload = {
        "amount": to_paise(amount),
        "currency": gateway_currency(),
        "receipt": receipt[:40],
        "notes": notes or {},
    }
    parsed = _request_json("POST", "/orders", body=payload)
    if not parsed.get("id"):
        raise GatewayError("Razorpay order response has no id")

    logger.info("Gateway order created", extra={"gateway_order_id": parsed["id"], "receipt": receipt})
    return parsed


def fetch_payment(payment_id: str) -> dict:
    payment_id = str(payment_id or "").strip()
    if not payment_id:
        raise GatewayError("Missing payment id")
    return _request_json("GET", f"/payments/{payment_id}")


def _hmac_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(*, gateway_order_id: str, gateway_payment_id: str, signature: str | None) -> bool:
    secret = _key_secret()
    if not secret or not signature:
        return False
    expected = _hmac_hex(secret, f"{gateway_order_id}|{gateway_payment_id}".encode("utf-8"))
    return hmac.compare_digest(expected, str(signature).strip())


def verify_webhook_signature(*, raw_body: bytes, signature: str | None) -> bool:
    secret = _webhook_secret()
    if not secret or not signature:
        return False
    expected = _hmac_hex(secret, raw_body or b"")
    return hmac.compare_digest(expected, str(signature).strip())
