# orders/services/status.py
"""
ORDER STATUS TRANSITIONS

Rules:
- Any known stage may follow any other (staff correct mistakes freely)
- Setting the current status again is a no-op: no history row, no notification
- The history row is written by Order.save() inside the same transaction
- Notifications are queued only after the transaction commits
- Pickup: READY -> DELIVERED, and a priced order must be fully paid first
"""

from __future__ import annotations

import logging

from django.db import transaction

from orders.models import Order
from orders.services.exceptions import (
    InvalidOrderStatusError,
    OrderNotReadyError,
    PaymentRequiredError,
)
from orders.services.pricing import PAYMENT_PAID

logger = logging.getLogger(__name__)


def resolve_status(value) -> str:
    status = Order.normalize_status(value)
    if status is None:
        raise InvalidOrderStatusError(f"Unknown status: {value}")
    return status


@transaction.atomic
def change_status(*, order: Order, status, actor=None, note: str = "") -> bool:
    """
    Returns True when the status actually changed.
    """
    from notifications import tasks

    target = resolve_status(status)
    order = Order.objects.select_for_update().get(pk=order.pk)

    if order.status == target:
        return False

    previous = order.status
    order.status = target
    order.save(actor=actor, note=note)

    logger.info(
        "Order status changed",
        extra={"order_id": str(order.id), "from": previous, "to": target},
    )
    tasks.queue_status_notifications(order_id=order.id, status=target)
    return True


def mark_picked_up(*, order: Order, actor=None) -> Order:
    if order.status != Order.STATUS_READY:
        raise OrderNotReadyError("Order is not ready for pickup yet")

    if order.amount > 0 and order.payment_status != PAYMENT_PAID:
        raise PaymentRequiredError(
            "Payment required before pickup. Please complete payment first."
        )

    change_status(order=order, status=Order.STATUS_DELIVERED, actor=actor, note="Picked up")
    order.refresh_from_db()
    return order
