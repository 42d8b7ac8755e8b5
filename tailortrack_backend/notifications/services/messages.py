# notifications/services/messages.py
"""
Customer-facing message text (SMS bodies, email subjects, in-app titles).
"""

from __future__ import annotations

from django.conf import settings

from orders.services.pricing import PAYMENT_PAID, money

SHOP_NAME = "Tailor Track"


def _currency() -> str:
    cfg = getattr(settings, "TAILORTRACK", {}) or {}
    return cfg.get("CURRENCY") or "INR"


def first_name(name: str) -> str:
    parts = str(name or "").split()
    return parts[0] if parts else "there"


def item_lines(order) -> list[str]:
    if not order.items:
        return [order.cloth_type.title()] if order.cloth_type else []
    lines = []
    for item in order.items:
        label = str(item.get("cloth_type") or "item").title()
        quantity = int(item.get("quantity") or 1)
        lines.append(f"{label} (Qty: {quantity})" if quantity > 1 else label)
    return lines


def amount_due(order):
    if order.payment_status == PAYMENT_PAID or order.balance_amount <= 0:
        return None
    return f"{_currency()} {money(order.balance_amount)}"


def order_created_sms(order) -> str:
    return (
        f"Hi {order.customer_name}, your tailoring order has been placed successfully!\n\n"
        f"Order ID: {order.barcode}\n\n"
        f"Track your order here: {order.tracking_link}\n\n"
        f"Thank you for choosing {SHOP_NAME}!"
    )


def status_update_sms(order) -> str:
    return (
        f"Hi {order.customer_name}, your order {order.barcode} status has been updated to: "
        f"{order.status_label}\n\n"
        f"Track your order: {order.tracking_link}\n\n"
        f"{SHOP_NAME}"
    )


def ready_for_pickup_sms(order) -> str:
    text = (
        f"Hi {first_name(order.customer_name)}, your order {order.barcode} is ready for pickup!\n"
        f"Items: {', '.join(item_lines(order)) or '-'}\n"
    )
    due = amount_due(order)
    if due:
        text += f"Amount due: {due}\n"
    return text + f"Track: {order.tracking_link}\n{SHOP_NAME}"


def order_confirmation_subject(order) -> str:
    return f"Order Confirmation #{order.order_number}"


def ready_for_pickup_subject(order) -> str:
    return f"Your Order #{order.order_number} is Ready for Pickup!"


def order_email_context(order) -> dict:
    return {
        "order": order,
        "first_name": first_name(order.customer_name),
        "items": item_lines(order),
        "amount_due": amount_due(order),
        "currency": _currency(),
        "shop_name": SHOP_NAME,
    }
