# orders/models/order.py

import logging
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.utils import timezone

from orders.services.identifiers import MAX_ATTEMPTS, generate_unique_barcode, next_order_number
from orders.services.pricing import (
    CLOTH_TYPES,
    PAYMENT_PAID,
    PAYMENT_PARTIAL,
    PAYMENT_PENDING,
    recompute_financials,
)

logger = logging.getLogger(__name__)


class Order(models.Model):
    """
    Tailoring order (single canonical shape for multi-item and legacy single-garment orders).

    Key rules:
    - barcode + order_number are generated on first save and unique at the DB
    - financial fields are re-derived on EVERY save (orders/services/pricing.py)
    - payment_status is never set by callers
    - a status change appends one OrderStatusHistory row in the same transaction
    - first move to DELIVERED stamps delivery_date (if unset)
    - tracking_link is fixed at creation
    """

    STATUS_PENDING = "pending"
    STATUS_MEASUREMENT_TAKEN = "measurement-taken"
    STATUS_CUTTING_DONE = "cutting-done"
    STATUS_STITCHING = "stitching-in-progress"
    STATUS_READY_FOR_TRIAL = "ready-for-trial"
    STATUS_TRIAL_DONE = "trial-done"
    STATUS_READY = "ready-for-delivery"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_MEASUREMENT_TAKEN, "Measurement Taken"),
        (STATUS_CUTTING_DONE, "Cutting Done"),
        (STATUS_STITCHING, "Stitching In Progress"),
        (STATUS_READY_FOR_TRIAL, "Ready For Trial"),
        (STATUS_TRIAL_DONE, "Trial Done"),
        (STATUS_READY, "Ready For Delivery"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    # Older clients send the short workflow names.
    LEGACY_STATUS_ALIASES = {
        "received": STATUS_PENDING,
        "measuring": STATUS_MEASUREMENT_TAKEN,
        "stitching": STATUS_STITCHING,
        "qc": STATUS_TRIAL_DONE,
        "ready": STATUS_READY,
        "picked-up": STATUS_DELIVERED,
    }

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PARTIAL, "Partial"),
        (PAYMENT_PAID, "Paid"),
    ]

    CLOTH_TYPE_CHOICES = [(c, c.title()) for c in CLOTH_TYPES]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(max_length=32, unique=True, blank=True)
    barcode = models.CharField(max_length=32, unique=True, blank=True)

    # Customer (FK optional; denormalised contact always populated)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )
    customer_name = models.CharField(max_length=200)
    phone_number = models.CharField(max_length=20)
    address = models.TextField(blank=True, default="")

    # Garments
    items = models.JSONField(default=list, blank=True)
    cloth_type = models.CharField(max_length=20, choices=CLOTH_TYPE_CHOICES, blank=True, default="")
    measurements = models.JSONField(default=dict, blank=True)
    special_instructions = models.TextField(blank=True, default="")

    # Money (server authoritative)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    advance_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    balance_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_status = models.CharField(
        max_length=16, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING
    )

    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_PENDING)

    due_date = models.DateField(null=True, blank=True)
    delivery_date = models.DateTimeField(null=True, blank=True)

    tracking_link = models.URLField(max_length=300, blank=True, default="")
    sms_sent = models.BooleanField(default=False)
    sms_sent_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders_created",
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders_assigned",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["phone_number"], name="orders_phone_idx"),
            models.Index(fields=["customer", "created_at"], name="orders_customer_created_idx"),
            models.Index(fields=["created_at"], name="orders_created_idx"),
        ]

    @classmethod
    def normalize_status(cls, value):
        """Canonical status for `value` (legacy names accepted) or None."""
        value = str(value or "").strip().lower()
        value = cls.LEGACY_STATUS_ALIASES.get(value, value)
        return value if value in dict(cls.STATUS_CHOICES) else None

    @property
    def status_label(self) -> str:
        return dict(self.STATUS_CHOICES).get(self.status, self.status)

    @property
    def owner(self):
        """Account that owns the order: the linked customer's user, else its creator."""
        if self.customer_id and self.customer.user_id:
            return self.customer.user
        return self.created_by

    def _stored_status(self):
        if self._state.adding:
            return None
        return type(self).objects.filter(pk=self.pk).values_list("status", flat=True).first()

    def _build_tracking_link(self) -> str:
        base = (getattr(settings, "FRONTEND_BASE_URL", "") or "").rstrip("/")
        return f"{base}/track/{self.barcode}"

    def save(self, *args, actor=None, note="", **kwargs):
        adding = self._state.adding
        previous_status = self._stored_status()
        status_changed = adding or previous_status != self.status

        recompute_financials(self)

        if status_changed and self.status == self.STATUS_DELIVERED and not self.delivery_date:
            self.delivery_date = timezone.now()

        if not adding:
            self._write(status_changed, actor, note, *args, **kwargs)
            return

        barcode_generated = not self.barcode
        number_generated = not self.order_number
        if barcode_generated:
            self.barcode = generate_unique_barcode()
        self.barcode = self.barcode.upper()
        if number_generated:
            self.order_number = next_order_number()
        if not self.tracking_link:
            self.tracking_link = self._build_tracking_link()

        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                self._write(True, actor, note, *args, **kwargs)
                return
            except IntegrityError:
                if attempt == MAX_ATTEMPTS or not (barcode_generated or number_generated):
                    raise
                logger.warning(
                    "Order identifier collision, regenerating",
                    extra={"order_number": self.order_number, "attempt": attempt},
                )
                if number_generated:
                    self.order_number = next_order_number()
                if barcode_generated:
                    self.barcode = generate_unique_barcode()
                    self.tracking_link = self._build_tracking_link()

    def _write(self, status_changed, actor, note, *args, **kwargs):
        from orders.models.status_history import OrderStatusHistory

        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            # derived fields always travel with the write
            kwargs["update_fields"] = set(update_fields) | {
                "subtotal",
                "amount",
                "balance_amount",
                "payment_status",
                "delivery_date",
                "updated_at",
            }
            if status_changed:
                kwargs["update_fields"].add("status")

        with transaction.atomic():
            super().save(*args, **kwargs)
            if status_changed:
                OrderStatusHistory.objects.create(
                    order=self,
                    status=self.status,
                    changed_by=actor if getattr(actor, "pk", None) else None,
                    note=note or "",
                )

    def __str__(self):
        return f"{self.order_number} | {self.barcode} | {self.status}"
