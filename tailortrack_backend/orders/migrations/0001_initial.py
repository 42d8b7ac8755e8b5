import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_number", models.CharField(blank=True, max_length=32, unique=True)),
                ("barcode", models.CharField(blank=True, max_length=32, unique=True)),
                ("customer_name", models.CharField(max_length=200)),
                ("phone_number", models.CharField(max_length=20)),
                ("address", models.TextField(blank=True, default="")),
                ("items", models.JSONField(blank=True, default=list)),
                (
                    "cloth_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("shirt", "Shirt"),
                            ("pants", "Pants"),
                            ("suit", "Suit"),
                            ("dress", "Dress"),
                            ("kurta", "Kurta"),
                            ("blouse", "Blouse"),
                            ("other", "Other"),
                        ],
                        default="",
                        max_length=20,
                    ),
                ),
                ("measurements", models.JSONField(blank=True, default=dict)),
                ("special_instructions", models.TextField(blank=True, default="")),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("discount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("advance_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                ("balance_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("partial", "Partial"), ("paid", "Paid")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("measurement-taken", "Measurement Taken"),
                            ("cutting-done", "Cutting Done"),
                            ("stitching-in-progress", "Stitching In Progress"),
                            ("ready-for-trial", "Ready For Trial"),
                            ("trial-done", "Trial Done"),
                            ("ready-for-delivery", "Ready For Delivery"),
                            ("delivered", "Delivered"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=32,
                    ),
                ),
                ("due_date", models.DateField(blank=True, null=True)),
                ("delivery_date", models.DateTimeField(blank=True, null=True)),
                ("tracking_link", models.URLField(blank=True, default="", max_length=300)),
                ("sms_sent", models.BooleanField(default=False)),
                ("sms_sent_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="customers.customer",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "assigned_to",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders_assigned",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="orders_status_idx"),
                    models.Index(fields=["phone_number"], name="orders_phone_idx"),
                    models.Index(fields=["customer", "created_at"], name="orders_customer_created_idx"),
                    models.Index(fields=["created_at"], name="orders_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusHistory",
            fields=[
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("status", models.CharField(max_length=32)),
                ("note", models.CharField(blank=True, default="", max_length=255)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_history",
                        to="orders.order",
                    ),
                ),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["timestamp", "id"],
                "indexes": [
                    models.Index(fields=["order", "timestamp"], name="orders_hist_order_ts_idx"),
                ],
            },
        ),
    ]
