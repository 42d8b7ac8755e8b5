# notifications/models/notification.py

import uuid

from django.conf import settings
from django.db import models


class Notification(models.Model):
    """
    In-app notification for one recipient.

    Rules:
    - only is_read / read_at change after creation
    - deleted only by the recipient
    """

    TYPE_ORDER_CONFIRMATION = "order_confirmation"
    TYPE_STATUS_UPDATE = "status_update"
    TYPE_ADMIN_BROADCAST = "admin_broadcast"
    TYPE_READY_FOR_PICKUP = "ready_for_pickup"

    TYPE_CHOICES = [
        (TYPE_ORDER_CONFIRMATION, "Order Confirmation"),
        (TYPE_STATUS_UPDATE, "Status Update"),
        (TYPE_ADMIN_BROADCAST, "Admin Broadcast"),
        (TYPE_READY_FOR_PICKUP, "Ready For Pickup"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["recipient", "is_read", "created_at"], name="notif_recipient_read_idx"),
        ]

    def __str__(self):
        return f"{self.type} -> {self.recipient_id} ({'read' if self.is_read else 'unread'})"
