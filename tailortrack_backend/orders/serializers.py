# orders/serializers.py

"""
ORDER SERIALIZERS

Input:
- OrderCreateSerializer: multi-item (`items`) OR legacy single garment (`cloth_type` + `amount`)
- OrderUpdateSerializer: back-office edits (status handled separately)
- camelCase keys from older clients are accepted (normalize_payload)

Output:
- OrderSerializer: full staff/owner view with status history
- TrackingOrderSerializer: public, customer-safe projection (no actors, no phone)
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework import serializers

from customers.models import Customer
from orders.models import Order, OrderStatusHistory
from orders.services.pricing import CLOTH_TYPES, items_subtotal, normalize_item
from permissions.roles import STAFF_ROLES

CAMEL_TO_SNAKE = {
    "customerId": "customer",
    "customerName": "customer_name",
    "phoneNumber": "phone_number",
    "clothType": "cloth_type",
    "itemType": "cloth_type",
    "specialInstructions": "special_instructions",
    "notes": "special_instructions",
    "expectedDeliveryDate": "due_date",
    "expected_delivery_date": "due_date",
    "dueDate": "due_date",
    "advancePayment": "advance_amount",
    "advanceAmount": "advance_amount",
    "advance_payment": "advance_amount",
    "totalAmount": "amount",
    "assignedTo": "assigned_to",
}


def normalize_payload(data) -> dict:
    out = {}
    for key, value in (data or {}).items():
        target = CAMEL_TO_SNAKE.get(key, key)
        if target in out and key != target:
            continue
        out[target] = value
    return out


class OrderItemSerializer(serializers.Serializer):
    cloth_type = serializers.ChoiceField(choices=CLOTH_TYPES)
    description = serializers.CharField(required=False, allow_blank=True)
    measurements = serializers.DictField(required=False)
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), required=False, default=Decimal("0.00")
    )

    def to_internal_value(self, data):
        try:
            item = normalize_item(data)
        except ValueError as exc:
            raise serializers.ValidationError(str(exc))
        super().to_internal_value(item)
        return item


def _address_text(value) -> str:
    if isinstance(value, dict):
        parts = [value.get(k) for k in ("street", "city", "state", "zip_code", "zipCode", "country")]
        return ", ".join(str(p) for p in parts if p)
    return str(value or "").strip()


class _OrderFieldsMixin(serializers.Serializer):
    customer_name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    phone_number = serializers.CharField(required=False, allow_blank=True, max_length=20)
    address = serializers.JSONField(required=False)

    items = OrderItemSerializer(many=True, required=False)
    cloth_type = serializers.ChoiceField(choices=CLOTH_TYPES, required=False, allow_blank=True)
    measurements = serializers.DictField(required=False)
    special_instructions = serializers.CharField(required=False, allow_blank=True)

    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), required=False
    )
    discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), required=False
    )
    due_date = serializers.DateField(required=False, allow_null=True)

    def to_internal_value(self, data):
        return super().to_internal_value(normalize_payload(data))

    def validate_cloth_type(self, value):
        return (value or "").strip().lower()

    def validate_address(self, value):
        return _address_text(value)

    def _check_discount(self, attrs, existing_items=None):
        items = attrs.get("items", existing_items) or []
        discount = attrs.get("discount")
        if items and discount is not None and discount > items_subtotal(items):
            raise serializers.ValidationError({"discount": "Discount cannot exceed the items subtotal"})


class OrderCreateSerializer(_OrderFieldsMixin):
    customer = serializers.PrimaryKeyRelatedField(
        queryset=Customer.objects.filter(is_active=True), required=False, allow_null=True
    )
    advance_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), required=False
    )

    def validate(self, attrs):
        items = attrs.get("items") or []
        if not items and not attrs.get("cloth_type"):
            raise serializers.ValidationError("Cloth type or items array is required")

        if not attrs.get("customer") and not self.context.get("customer"):
            if not (attrs.get("customer_name") or "").strip() or not (attrs.get("phone_number") or "").strip():
                raise serializers.ValidationError("Customer name and phone number are required")

        self._check_discount(attrs)

        if items:
            # amount is derived from items
            attrs.pop("amount", None)
        else:
            attrs.pop("discount", None)

        for key in ("customer_name", "phone_number"):
            if key in attrs:
                attrs[key] = attrs[key].strip()
        return attrs


class OrderUpdateSerializer(_OrderFieldsMixin):
    """
    Back-office edits. `status` is accepted on PATCH and routed through the
    status service by the view; `advance_amount` only moves through payments.
    """

    status = serializers.CharField(required=False)
    assigned_to = serializers.PrimaryKeyRelatedField(
        queryset=get_user_model().objects.filter(role__in=STAFF_ROLES, is_active=True),
        required=False,
        allow_null=True,
    )

    def validate_status(self, value):
        status = Order.normalize_status(value)
        if status is None:
            raise serializers.ValidationError(f"Unknown status: {value}")
        return status

    def validate(self, attrs):
        existing_items = self.instance.items if self.instance is not None else None
        if existing_items and "items" in attrs and not attrs["items"]:
            raise serializers.ValidationError({"items": "An itemized order needs at least one item"})

        self._check_discount(attrs, existing_items=existing_items)

        if attrs.get("discount") is None and attrs.get("items") and self.instance is not None:
            if self.instance.discount > items_subtotal(attrs["items"]):
                raise serializers.ValidationError({"discount": "Discount cannot exceed the items subtotal"})
        return attrs


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField()
    note = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_status(self, value):
        status = Order.normalize_status(value)
        if status is None:
            raise serializers.ValidationError(f"Unknown status: {value}")
        return status


# ---------------------------------------------------------
# OUTPUT
# ---------------------------------------------------------
class OrderStatusHistorySerializer(serializers.ModelSerializer):
    changed_by = serializers.SerializerMethodField()

    class Meta:
        model = OrderStatusHistory
        fields = ["status", "timestamp", "changed_by", "note"]

    def get_changed_by(self, obj):
        user = obj.changed_by
        if user is None:
            return None
        return {"id": str(user.id), "name": user.full_name, "role": user.role}


class OrderSerializer(serializers.ModelSerializer):
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)
    status_label = serializers.CharField(read_only=True)
    expected_delivery_date = serializers.DateField(source="due_date", read_only=True)
    customer = serializers.UUIDField(source="customer_id", read_only=True)
    created_by = serializers.UUIDField(source="created_by_id", read_only=True)
    assigned_to = serializers.UUIDField(source="assigned_to_id", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "barcode",
            "customer",
            "customer_name",
            "phone_number",
            "address",
            "items",
            "cloth_type",
            "measurements",
            "special_instructions",
            "subtotal",
            "discount",
            "amount",
            "advance_amount",
            "balance_amount",
            "payment_status",
            "status",
            "status_label",
            "status_history",
            "due_date",
            "expected_delivery_date",
            "delivery_date",
            "tracking_link",
            "sms_sent",
            "sms_sent_at",
            "created_by",
            "assigned_to",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TrackingHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ["status", "timestamp"]


class TrackingOrderSerializer(serializers.ModelSerializer):
    """Public projection: no phone, no address, no staff/actor fields."""

    status_history = TrackingHistorySerializer(many=True, read_only=True)
    status_label = serializers.CharField(read_only=True)
    expected_delivery_date = serializers.DateField(source="due_date", read_only=True)

    class Meta:
        model = Order
        fields = [
            "barcode",
            "order_number",
            "customer_name",
            "cloth_type",
            "items",
            "status",
            "status_label",
            "expected_delivery_date",
            "delivery_date",
            "amount",
            "advance_amount",
            "balance_amount",
            "payment_status",
            "special_instructions",
            "status_history",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TrackingSearchSerializer(serializers.Serializer):
    phone_number = serializers.CharField(max_length=20)

    def to_internal_value(self, data):
        return super().to_internal_value(normalize_payload(data))
