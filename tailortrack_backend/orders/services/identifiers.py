# orders/services/identifiers.py
"""
ORDER IDENTIFIERS

Purpose:
- barcode: public tracking id printed on the order slip (upper-case, A-Z0-9)
- order number: human-readable daily sequence, {SHOP_CODE}-YYYYMMDD-NNNN

Rules:
- Barcodes are pre-checked against existing orders, up to MAX_ATTEMPTS tries.
  Exhausted => IdentifierGenerationError (nothing is persisted).
- Order numbers read the highest sequence for today's local date and add 1.
  Concurrent creators can compute the same number; Order.save() retries the
  insert with a fresh number when the unique constraint rejects it.
- The database unique constraints remain the final guarantee.
"""

from __future__ import annotations

import secrets
import string
import time
from datetime import datetime

from django.conf import settings
from django.utils import timezone

from orders.services.exceptions import IdentifierGenerationError

MAX_ATTEMPTS = 10
RANDOM_CODE_LENGTH = 10
BASE36_ALPHABET = string.digits + string.ascii_uppercase

STRATEGY_RANDOM = "random"
STRATEGY_TIMESTAMP = "timestamp"


def _shop_code() -> str:
    cfg = getattr(settings, "TAILORTRACK", {}) or {}
    return (cfg.get("SHOP_CODE") or "TT").strip().upper()[:2] or "TT"


def _strategy() -> str:
    cfg = getattr(settings, "TAILORTRACK", {}) or {}
    return (cfg.get("BARCODE_STRATEGY") or STRATEGY_RANDOM).strip().lower()


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(BASE36_ALPHABET[rem])
    return "".join(reversed(out))


def generate_barcode_string(*, now_ms: int | None = None) -> str:
    """
    {SHOP_CODE} + first 6 base-36 chars of epoch-ms + 2 random base-36 chars.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    stamp = to_base36(now_ms)[:6]
    tail = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(2))
    return f"{_shop_code()}{stamp}{tail}".upper()


def generate_random_code(length: int = RANDOM_CODE_LENGTH) -> str:
    """
    {SHOP_CODE} + random A-Z0-9 up to `length` characters in total.
    """
    prefix = _shop_code()
    remaining = max(length - len(prefix), 1)
    body = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(remaining))
    return f"{prefix}{body}"


def generate_candidate_barcode() -> str:
    if _strategy() == STRATEGY_TIMESTAMP:
        return generate_barcode_string()
    return generate_random_code(RANDOM_CODE_LENGTH)


def generate_unique_barcode(*, exists=None, generator=None) -> str:
    """
    Produce a barcode not yet used by any order.

    `exists(code) -> bool` and `generator() -> str` are injectable for tests.
    """
    if exists is None:
        from orders.models import Order

        def exists(code):
            return Order.objects.filter(barcode=code).exists()

    generator = generator or generate_candidate_barcode

    for _ in range(MAX_ATTEMPTS):
        code = generator().upper()
        if not exists(code):
            return code

    raise IdentifierGenerationError("Failed to generate unique barcode")


def order_number_prefix(now: datetime | None = None) -> str:
    local = timezone.localtime(now or timezone.now())
    return f"{_shop_code()}-{local:%Y%m%d}-"


def parse_sequence(order_number: str) -> int:
    try:
        return int(str(order_number).rsplit("-", 1)[1])
    except (IndexError, ValueError):
        return 0


def next_order_number(now: datetime | None = None) -> str:
    """
    Highest sequence issued for today's local date + 1, zero-padded to 4.
    """
    from orders.models import Order

    prefix = order_number_prefix(now)
    numbers = Order.objects.filter(order_number__startswith=prefix).values_list(
        "order_number", flat=True
    )
    highest = max((parse_sequence(n) for n in numbers), default=0)
    return f"{prefix}{highest + 1:04d}"
