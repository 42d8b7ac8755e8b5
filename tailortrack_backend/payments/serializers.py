# payments/serializers.py

from decimal import Decimal

from rest_framework import serializers

from payments.models import Payment

GATEWAY_KEY_ALIASES = {
    "orderId": "order_id",
    "order": "order_id",
    "razorpayOrderId": "gateway_order_id",
    "razorpay_order_id": "gateway_order_id",
    "razorpayPaymentId": "gateway_payment_id",
    "razorpay_payment_id": "gateway_payment_id",
    "razorpaySignature": "gateway_signature",
    "razorpay_signature": "gateway_signature",
    "paymentMethod": "payment_method",
    "transactionId": "transaction_id",
}


def normalize_gateway_keys(data) -> dict:
    out = {}
    for key, value in (data or {}).items():
        target = GATEWAY_KEY_ALIASES.get(key, key)
        if target in out and key != target:
            continue
        out[target] = value
    return out


class _AliasedInputSerializer(serializers.Serializer):
    def to_internal_value(self, data):
        return super().to_internal_value(normalize_gateway_keys(data))


class PaymentSerializer(serializers.ModelSerializer):
    order = serializers.UUIDField(source="order_id", read_only=True)
    customer = serializers.UUIDField(source="customer_id", read_only=True)
    processed_by = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            "id",
            "order",
            "customer",
            "amount",
            "payment_method",
            "payment_status",
            "gateway_order_id",
            "gateway_payment_id",
            "transaction_id",
            "notes",
            "processed_by",
            "payment_date",
            "created_at",
        ]
        read_only_fields = fields

    def get_processed_by(self, obj):
        user = obj.processed_by
        if user is None:
            return None
        return {"id": str(user.id), "name": user.full_name, "email": user.email}


class ManualPaymentSerializer(_AliasedInputSerializer):
    order_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = serializers.ChoiceField(choices=Payment.MANUAL_METHODS)
    transaction_id = serializers.CharField(required=False, allow_blank=True, max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True)


class GatewayOrderRequestSerializer(_AliasedInputSerializer):
    order_id = serializers.UUIDField()


class VerifyPaymentSerializer(_AliasedInputSerializer):
    order_id = serializers.UUIDField()
    gateway_order_id = serializers.CharField(max_length=64)
    gateway_payment_id = serializers.CharField(max_length=64)
    gateway_signature = serializers.CharField(max_length=128)
