# notifications/services/sms.py
"""
SMS via the Twilio REST API (urllib, no SDK).

Rules:
- Credentials come from settings.NOTIFICATIONS["TWILIO"]
- Placeholder credentials (sid not starting with "AC", or containing "your_")
  count as "not configured": nothing is sent, no exception
- Every call returns a DeliveryResult; transport and provider errors are
  folded into ok=False
- Full phone numbers are never logged
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from django.conf import settings

from notifications.services.phones import mask_phone, normalize_phone
from notifications.services.results import CHANNEL_SMS, DeliveryResult

logger = logging.getLogger(__name__)

TWILIO_BASE = "https://api.twilio.com/2010-04-01"


class SmsProviderError(RuntimeError):
    pass


def _twilio_cfg() -> dict:
    notifications = getattr(settings, "NOTIFICATIONS", {}) or {}
    cfg = notifications.get("TWILIO") if isinstance(notifications, dict) else None
    return cfg if isinstance(cfg, dict) else {}


def _timeout() -> float:
    cfg = getattr(settings, "TAILORTRACK", {}) or {}
    return float(cfg.get("OUTBOUND_HTTP_TIMEOUT") or 25)


def sms_configured() -> bool:
    cfg = _twilio_cfg()
    sid = (cfg.get("ACCOUNT_SID") or "").strip()
    token = (cfg.get("AUTH_TOKEN") or "").strip()
    sender = (cfg.get("FROM_NUMBER") or "").strip()
    return bool(sid and token and sender and sid.startswith("AC") and "your_" not in sid)


def _post_form(url: str, fields: dict, *, sid: str, token: str) -> dict[str, Any]:
    credentials = base64.b64encode(f"{sid}:{token}".encode("utf-8")).decode("ascii")
    req = Request(
        url,
        data=urlencode(fields).encode("utf-8"),
        headers={
            "Authorization": f"Basic {credentials}",
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        },
        method="POST",
    )

    try:
        with urlopen(req, timeout=_timeout()) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        try:
            body = json.loads(e.read().decode("utf-8", errors="replace") or "{}")
        except ValueError:
            body = {}
        msg = body.get("message") if isinstance(body, dict) else None
        raise SmsProviderError(f"Twilio HTTPError: {e.code} {msg or e.reason}") from e
    except URLError as e:
        raise SmsProviderError(f"Twilio URLError: {e.reason}") from e
    except TimeoutError as e:
        raise SmsProviderError("Twilio request timed out") from e

    try:
        parsed = json.loads(raw)
    except ValueError as e:
        raise SmsProviderError("Twilio returned non-JSON") from e
    if not isinstance(parsed, dict):
        raise SmsProviderError("Twilio returned an unexpected payload")
    return parsed


def send_sms(*, to: str, body: str) -> DeliveryResult:
    if not sms_configured():
        logger.warning("SMS not sent: Twilio not configured", extra={"to": mask_phone(to)})
        return DeliveryResult.not_configured(CHANNEL_SMS, "Twilio not configured")

    recipient = normalize_phone(to)
    if not recipient:
        return DeliveryResult(ok=False, channel=CHANNEL_SMS, detail="Missing phone number")

    cfg = _twilio_cfg()
    sid = cfg["ACCOUNT_SID"].strip()

    try:
        parsed = _post_form(
            f"{TWILIO_BASE}/Accounts/{sid}/Messages.json",
            {"To": recipient, "From": cfg["FROM_NUMBER"].strip(), "Body": body},
            sid=sid,
            token=cfg["AUTH_TOKEN"].strip(),
        )
    except SmsProviderError as exc:
        logger.warning("SMS send failed", extra={"to": mask_phone(recipient), "error": str(exc)})
        return DeliveryResult(ok=False, channel=CHANNEL_SMS, detail=str(exc))

    message_sid = str(parsed.get("sid") or "")
    logger.info("SMS sent", extra={"to": mask_phone(recipient), "sid": message_sid})
    return DeliveryResult(
        ok=True,
        channel=CHANNEL_SMS,
        detail=str(parsed.get("status") or "queued"),
        provider_id=message_sid,
    )
