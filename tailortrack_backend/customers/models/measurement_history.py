# customers/models/measurement_history.py

import uuid

from django.conf import settings
from django.db import models


class CustomerMeasurementHistory(models.Model):
    """
    Append-only snapshot of a customer's PREVIOUS measurement profile.
    Rows are never updated.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="measurement_history",
    )
    measurements = models.JSONField(default=dict)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes = models.TextField(blank=True, default="")
    updated_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["customer", "updated_at"], name="customers_hist_cust_upd_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Measurement history entries are immutable")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.customer_id} @ {self.updated_at}"
