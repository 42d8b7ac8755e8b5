# orders/models/status_history.py

from django.conf import settings
from django.db import models


class OrderStatusHistory(models.Model):
    """
    Append-only audit trail of workflow stages.

    Rules:
    - written only by Order.save() when the status changes (and on creation)
    - never updated, never deleted individually
    - latest row (by timestamp) == order.status
    """

    # auto-increment id breaks timestamp ties
    id = models.BigAutoField(primary_key=True)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    status = models.CharField(max_length=32)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    note = models.CharField(max_length=255, blank=True, default="")
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["timestamp", "id"]
        indexes = [
            models.Index(fields=["order", "timestamp"], name="orders_hist_order_ts_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Status history entries are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Status history entries cannot be deleted")

    def __str__(self):
        return f"{self.order_id} -> {self.status} @ {self.timestamp}"
