from decimal import Decimal

from rest_framework import serializers

from .discounts import normalize_code
from .models import Discount, DiscountType


class DiscountSerializer(serializers.ModelSerializer):
    remaining_uses = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Discount
        fields = (
            "id", "code", "description", "type", "value", "active", "start_date", "end_date",
            "usage_limit", "used_count", "remaining_uses", "minimum_order_amount",
            "created_at", "updated_at",
        )
        read_only_fields = ("id", "used_count", "created_at", "updated_at")

    def validate_code(self, value):
        code = normalize_code(value)
        if not code:
            raise serializers.ValidationError("Code cannot be blank.")
        return code

    def validate(self, attrs):
        kind = attrs.get("type", getattr(self.instance, "type", None))
        value = attrs.get("value", getattr(self.instance, "value", None))
        if kind == DiscountType.PERCENTAGE and value is not None and value > Decimal(100):
            raise serializers.ValidationError({"value": "Percentage discounts cannot exceed 100."})
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_date": "End date must be after start date."})
        return attrs


class DiscountBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Discount
        fields = ("id", "code", "type", "value")


class DiscountValidateSerializer(serializers.Serializer):
    code = serializers.CharField()
    order_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal(0))
