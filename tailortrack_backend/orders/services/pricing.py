# orders/services/pricing.py
"""
ORDER PRICING (DERIVED FINANCIAL FIELDS)

Runs before every order write (Order.save()):

1) items present:  subtotal = sum(price * quantity); amount = subtotal - discount
   items empty:    amount is kept as given, subtotal is 0 (legacy single-garment orders)
2) balance_amount = amount - advance_amount
3) payment_status = paid    if advance >= amount > 0
                    partial if 0 < advance < amount
                    pending otherwise (amount == 0 is never "paid")

Overpayment leaves a negative balance; it is stored as-is.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

PAYMENT_PENDING = "pending"
PAYMENT_PARTIAL = "partial"
PAYMENT_PAID = "paid"

CLOTH_TYPES = ("shirt", "pants", "suit", "dress", "kurta", "blouse", "other")
CLOTH_TYPE_KEYS = ("cloth_type", "clothType", "itemType", "item_type", "type")


def money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    try:
        return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f"Invalid money value: {v!r}")


def derive_payment_status(amount, advance) -> str:
    amount = money(amount)
    advance = money(advance)
    if amount > 0 and advance >= amount:
        return PAYMENT_PAID
    if advance > 0 and amount > 0 and advance < amount:
        return PAYMENT_PARTIAL
    return PAYMENT_PENDING


def parse_quantity(value) -> int:
    if value is None:
        return 1
    if isinstance(value, bool):
        raise ValueError("Quantity must be a whole number")
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError("Quantity must be a whole number")
    if not parsed.is_finite() or parsed != parsed.to_integral_value():
        raise ValueError("Quantity must be a whole number")
    return int(parsed)


def normalize_item(raw: dict) -> dict:
    """
    Canonical line item:
    {cloth_type, description, measurements, quantity >= 1, price >= 0 (str, 2dp)}
    """
    if not isinstance(raw, dict):
        raise ValueError("Each item must be an object")

    cloth_type = ""
    for key in CLOTH_TYPE_KEYS:
        if raw.get(key):
            cloth_type = str(raw[key]).strip().lower()
            break
    if cloth_type not in CLOTH_TYPES:
        raise ValueError(f"Unknown cloth type: {cloth_type or '(missing)'}")

    quantity = parse_quantity(raw.get("quantity", 1))
    if quantity < 1:
        raise ValueError("Quantity must be at least 1")

    price = money(raw.get("price"))
    if price < 0:
        raise ValueError("Price cannot be negative")

    measurements = raw.get("measurements") or {}
    if not isinstance(measurements, dict):
        raise ValueError("Item measurements must be an object")

    return {
        "cloth_type": cloth_type,
        "description": str(raw.get("description") or "").strip(),
        "measurements": measurements,
        "quantity": quantity,
        "price": str(price),
    }


def items_subtotal(items) -> Decimal:
    total = Decimal("0.00")
    for item in items or []:
        total += money(item.get("price")) * int(item.get("quantity") or 1)
    return money(total)


def recompute_financials(order) -> None:
    """
    Mutates `order` in place; persistence is the caller's job.
    """
    order.discount = money(order.discount)
    order.advance_amount = money(order.advance_amount)

    if order.items:
        order.subtotal = items_subtotal(order.items)
        order.amount = money(order.subtotal - order.discount)
    else:
        order.subtotal = Decimal("0.00")
        order.amount = money(order.amount)

    order.balance_amount = money(order.amount - order.advance_amount)
    order.payment_status = derive_payment_status(order.amount, order.advance_amount)
