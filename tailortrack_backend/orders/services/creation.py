# orders/services/creation.py
"""
ORDER CREATION

Purpose:
- Single entry point for customer-created and back-office orders

Rules:
- Linked customer => contact fields copied from the Customer row
- Customer running totals incremented in the same transaction
- Identifiers are generated by Order.save(); failure => IdentifierGenerationError
- Confirmation SMS / email / in-app notification queued after commit
"""

from __future__ import annotations

import logging

from django.db import transaction

from customers.models import Customer
from customers.services.profiles import record_order
from notifications.services.phones import mask_phone
from orders.models import Order

logger = logging.getLogger(__name__)


@transaction.atomic
def create_order(*, data: dict, actor=None, customer: Customer | None = None) -> Order:
    from notifications import tasks

    fields = dict(data)
    if customer is not None:
        fields["customer"] = customer
        fields["customer_name"] = fields.get("customer_name") or customer.name
        fields["phone_number"] = fields.get("phone_number") or customer.phone
        fields["address"] = fields.get("address") or customer.address_line()

    order = Order(created_by=actor if getattr(actor, "pk", None) else None, **fields)
    order.save(actor=actor, note="Order created")

    if order.customer_id:
        record_order(customer_id=order.customer_id, amount=order.amount)

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.id),
            "barcode": order.barcode,
            "order_number": order.order_number,
            "phone": mask_phone(order.phone_number),
        },
    )

    tasks.queue_order_created(order_id=order.id)
    return order


def apply_order_edits(*, order: Order, data: dict, actor=None, merge_measurements: bool = False) -> Order:
    """
    Back-office edit of non-status fields. Derived fields are re-computed on save.
    """
    for field, value in data.items():
        if field == "measurements" and merge_measurements:
            value = {**(order.measurements or {}), **(value or {})}
        setattr(order, field, value)
    order.save(actor=actor)
    return order
