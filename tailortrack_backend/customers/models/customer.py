# customers/models/customer.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models


class Customer(models.Model):
    """
    Shop customer (walk-in or linked to a customer account).

    Rules:
    - `measurements` is the CURRENT profile (open key -> number/string map)
    - previous profiles live in CustomerMeasurementHistory (append-only)
    - total_orders / total_spent are running totals, incremented per order,
      never recomputed
    - delete = soft delete (is_active=False)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="customer_profile",
    )

    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=20)

    # street / city / state / zip_code / country
    address = models.JSONField(default=dict, blank=True)
    age = models.PositiveIntegerField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    measurements = models.JSONField(default=dict, blank=True)

    total_orders = models.PositiveIntegerField(default=0)
    total_spent = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["phone"], name="customers_phone_idx"),
            models.Index(fields=["email"], name="customers_email_idx"),
            models.Index(fields=["is_active", "created_at"], name="customers_active_created_idx"),
        ]

    def address_line(self) -> str:
        parts = [
            (self.address or {}).get(key)
            for key in ("street", "city", "state", "zip_code", "country")
        ]
        return ", ".join(str(p) for p in parts if p)

    def __str__(self):
        return f"{self.name} | {self.phone}"
