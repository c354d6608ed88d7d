from rest_framework import serializers

from catalog.serializers import CategoryBriefSerializer
from catalog.models import Product
from crm.serializers import CustomerBriefSerializer
from marketing.serializers import DiscountBriefSerializer
from .models import Order, OrderItem, OrderStatus


# ---------- Read ----------
class OrderProductSerializer(serializers.ModelSerializer):
    category = CategoryBriefSerializer(read_only=True)

    class Meta:
        model = Product
        fields = ("id", "name", "sku", "price", "image_url", "category")


class OrderItemSerializer(serializers.ModelSerializer):
    product = OrderProductSerializer(read_only=True)

    class Meta:
        model = OrderItem
        fields = ("id", "product", "quantity", "unit_price", "total_price")


class OrderSerializer(serializers.ModelSerializer):
    customer = CustomerBriefSerializer(read_only=True)
    discount = DiscountBriefSerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = (
            "id", "status", "customer", "customer_name", "customer_email",
            "subtotal", "discount", "discount_amount", "total",
            "shipping_address", "notes", "items", "created_at", "updated_at",
        )
        read_only_fields = fields


class OrderSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = ("id", "customer_name", "status", "subtotal", "discount_amount", "total", "created_at")


# ---------- Write ----------
class OrderLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class OrderCreateSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    customer_email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    discount_code = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    shipping_address = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    items = OrderLineSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        if not attrs.get("customer_name") and not attrs.get("customer_id"):
            raise serializers.ValidationError({"customer_name": "Provide customer_name or customer_id."})
        return attrs


class OrderUpdateSerializer(serializers.ModelSerializer):
    """Descriptive fields only; money, items and status have their own paths."""
    class Meta:
        model = Order
        fields = ("customer_name", "customer_email", "shipping_address", "notes")


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
