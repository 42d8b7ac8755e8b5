# notifications/services/phones.py

from __future__ import annotations

import re

from django.conf import settings

_NON_DIGITS = re.compile(r"[^\d+]")


def default_country_code() -> str:
    cfg = getattr(settings, "TAILORTRACK", {}) or {}
    code = (cfg.get("DEFAULT_COUNTRY_CODE") or "+91").strip()
    return code if code.startswith("+") else f"+{code}"


def normalize_phone(phone: str) -> str:
    """
    E.164-ish form for providers: separators stripped, default country code
    prefixed when the number has no leading '+'.
    """
    cleaned = _NON_DIGITS.sub("", str(phone or "").strip())
    if not cleaned:
        return ""
    if cleaned.startswith("+"):
        return cleaned
    return f"{default_country_code()}{cleaned}"


def mask_phone(phone: str) -> str:
    digits = re.sub(r"\D", "", str(phone or ""))
    if len(digits) <= 4:
        return "*" * len(digits)
    return f"{'*' * (len(digits) - 4)}{digits[-4:]}"
