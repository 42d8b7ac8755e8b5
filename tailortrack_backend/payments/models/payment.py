# payments/models/payment.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Payment(models.Model):
    """
    One successful money movement applied to an order.

    Rules:
    - written once by payments/services/reconciliation.py, never updated
    - gateway_payment_id is unique when present (replays resolve to the same row)
    """

    METHOD_CASH = "cash"
    METHOD_CARD = "card"
    METHOD_UPI = "upi"
    METHOD_GATEWAY = "gateway"
    METHOD_ONLINE = "online"

    METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_CARD, "Card"),
        (METHOD_UPI, "UPI"),
        (METHOD_GATEWAY, "Payment Gateway"),
        (METHOD_ONLINE, "Online"),
    ]

    MANUAL_METHODS = (METHOD_CASH, METHOD_CARD, METHOD_UPI, METHOD_ONLINE)

    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_method = models.CharField(max_length=16, choices=METHOD_CHOICES)
    payment_status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_COMPLETED)

    gateway_order_id = models.CharField(max_length=64, blank=True, default="")
    gateway_payment_id = models.CharField(max_length=64, blank=True, default="")
    gateway_signature = models.CharField(max_length=128, blank=True, default="")
    transaction_id = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments_processed",
    )

    payment_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["gateway_payment_id"],
                condition=~Q(gateway_payment_id=""),
                name="payments_unique_gateway_payment",
            ),
        ]
        indexes = [
            models.Index(fields=["order", "created_at"], name="payments_order_created_idx"),
            models.Index(fields=["payment_status"], name="payments_status_idx"),
            models.Index(fields=["created_at"], name="payments_created_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Payments are immutable once recorded")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.payment_method} {self.amount} -> {self.order_id}"
