# payments/services/reconciliation.py
"""
PAYMENT RECONCILIATION

apply_payment():
- locks the order row, records one completed Payment, adds the amount to
  order.advance_amount and saves (balance / payment_status re-derived)
- no "amount <= balance" check: overpayment leaves a negative balance
- gateway replays: a payment id already recorded returns the existing row,
  nothing is added twice
- missing order => OrderNotFoundError, nothing written
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from orders.models import Order
from orders.services.pricing import money
from payments.models import Payment
from payments.services.exceptions import InvalidPaymentAmountError, OrderNotFoundError

logger = logging.getLogger(__name__)


def apply_payment(
    *,
    order_id,
    amount,
    method: str,
    actor=None,
    gateway_order_id: str = "",
    gateway_payment_id: str = "",
    gateway_signature: str = "",
    transaction_id: str = "",
    notes: str = "",
) -> tuple[Payment, bool]:
    """
    Returns (payment, created). created=False for an already recorded gateway payment.
    """
    try:
        amount = money(amount)
    except ValueError as exc:
        raise InvalidPaymentAmountError(str(exc)) from exc
    if amount <= 0:
        raise InvalidPaymentAmountError("Payment amount must be greater than zero")

    gateway_payment_id = (gateway_payment_id or "").strip()

    try:
        with transaction.atomic():
            order = Order.objects.select_for_update().filter(pk=order_id).first()
            if order is None:
                raise OrderNotFoundError(f"Order {order_id} not found")

            if gateway_payment_id:
                existing = Payment.objects.filter(gateway_payment_id=gateway_payment_id).first()
                if existing is not None:
                    logger.info(
                        "Duplicate gateway payment ignored",
                        extra={"gateway_payment_id": gateway_payment_id, "order_id": str(order.id)},
                    )
                    return existing, False

            payment = Payment.objects.create(
                order=order,
                customer_id=order.customer_id,
                amount=amount,
                payment_method=method,
                payment_status=Payment.STATUS_COMPLETED,
                gateway_order_id=gateway_order_id or "",
                gateway_payment_id=gateway_payment_id,
                gateway_signature=gateway_signature or "",
                transaction_id=transaction_id or gateway_payment_id,
                notes=notes or "",
                processed_by=actor if getattr(actor, "pk", None) else None,
            )

            order.advance_amount = money(order.advance_amount + amount)
            order.save(actor=actor)
    except IntegrityError:
        # a concurrent request recorded the same gateway payment first
        existing = Payment.objects.filter(gateway_payment_id=gateway_payment_id).first()
        if not gateway_payment_id or existing is None:
            raise
        return existing, False

    logger.info(
        "Payment applied",
        extra={
            "order_id": str(order.id),
            "payment_id": str(payment.id),
            "amount": str(amount),
            "method": method,
            "payment_status": order.payment_status,
        },
    )
    return payment, True
