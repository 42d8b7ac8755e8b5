# customers/services/profiles.py
"""
CUSTOMER PROFILE SERVICES

- update_measurements(): history-preserving measurement replace
- record_order(): running totals (atomic F() increment)
- ensure_customer_for_user(): customer accounts get a Customer row on first order
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from customers.models import Customer, CustomerMeasurementHistory

logger = logging.getLogger(__name__)


@transaction.atomic
def update_measurements(*, customer: Customer, measurements: dict, actor=None, notes: str = "") -> Customer:
    customer = Customer.objects.select_for_update().get(pk=customer.pk)

    if customer.measurements:
        CustomerMeasurementHistory.objects.create(
            customer=customer,
            measurements=customer.measurements,
            updated_by=actor,
            notes=notes or "",
        )

    customer.measurements = dict(measurements or {})
    customer.save(update_fields=["measurements", "updated_at"])

    logger.info(
        "Customer measurements updated",
        extra={"customer_id": str(customer.id), "keys": sorted(customer.measurements.keys())},
    )
    return customer


def record_order(*, customer_id, amount) -> None:
    Customer.objects.filter(pk=customer_id).update(
        total_orders=F("total_orders") + 1,
        total_spent=F("total_spent") + Decimal(str(amount or 0)),
    )


def ensure_customer_for_user(user) -> Customer:
    customer = Customer.objects.filter(user=user).first()
    if customer:
        return customer

    customer = Customer.objects.create(
        user=user,
        name=user.full_name,
        email=user.email,
        phone=user.phone or "",
    )
    logger.info(
        "Customer profile created for account",
        extra={"customer_id": str(customer.id), "user_id": str(user.id)},
    )
    return customer
