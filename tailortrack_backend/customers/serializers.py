# customers/serializers.py

"""
CUSTOMER SERIALIZERS

- measurements are an open map; values must be numbers or strings
- running totals and history are read-only
"""

from rest_framework import serializers

from customers.models import Customer, CustomerMeasurementHistory

ADDRESS_KEYS = {"street", "city", "state", "zip_code", "country"}


def validate_measurement_map(value):
    if value in (None, ""):
        return {}
    if not isinstance(value, dict):
        raise serializers.ValidationError("Measurements must be an object")
    for key, v in value.items():
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            raise serializers.ValidationError(f"Measurement '{key}' must be a number or string")
    return value


class MeasurementHistorySerializer(serializers.ModelSerializer):
    updated_by = serializers.UUIDField(source="updated_by_id", read_only=True)

    class Meta:
        model = CustomerMeasurementHistory
        fields = ["id", "measurements", "updated_by", "notes", "updated_at"]
        read_only_fields = fields


class CustomerSerializer(serializers.ModelSerializer):
    measurement_history = MeasurementHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Customer
        fields = [
            "id",
            "user",
            "name",
            "email",
            "phone",
            "address",
            "age",
            "notes",
            "measurements",
            "measurement_history",
            "total_orders",
            "total_spent",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "user",
            "measurement_history",
            "total_orders",
            "total_spent",
            "is_active",
            "created_at",
            "updated_at",
        ]

    def validate_phone(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Phone is required")

        qs = Customer.objects.filter(phone=value, is_active=True)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Customer with this phone number already exists")
        return value

    def validate_address(self, value):
        if value in (None, ""):
            return {}
        if not isinstance(value, dict):
            raise serializers.ValidationError("Address must be an object")
        unknown = set(value) - ADDRESS_KEYS
        if unknown:
            raise serializers.ValidationError(f"Unknown address fields: {', '.join(sorted(unknown))}")
        return value

    def validate_measurements(self, value):
        return validate_measurement_map(value)


class CustomerSelfSerializer(CustomerSerializer):
    """Customers may edit contact details only."""

    class Meta(CustomerSerializer.Meta):
        read_only_fields = CustomerSerializer.Meta.read_only_fields + ["measurements", "notes"]


class MeasurementUpdateSerializer(serializers.Serializer):
    measurements = serializers.JSONField()
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate_measurements(self, value):
        return validate_measurement_map(value)
