from rest_framework import serializers

from common.exceptions import NotFound
from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Category
        fields = ("id", "name", "description", "product_count", "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")


class CategoryBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ("id", "name")


class ProductSerializer(serializers.ModelSerializer):
    category = CategoryBriefSerializer(read_only=True)
    category_id = serializers.UUIDField(required=False, allow_null=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = (
            "id", "name", "description", "sku", "image_url", "price", "stock", "min_stock",
            "is_published", "is_low_stock", "category", "category_id", "created_at", "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_sku(self, value):
        # Blank SKUs are stored as NULL so they never collide
        value = (value or "").strip()
        return value or None

    def validate_category_id(self, value):
        if value is None:
            return None
        tenant = self.context["tenant"]
        if not Category.objects.filter(pk=value, tenant=tenant).exists():
            raise NotFound(f"Category with ID {value} not found")
        return value


class StockUpdateSerializer(serializers.Serializer):
    stock = serializers.IntegerField(min_value=0)


class PublishSerializer(serializers.Serializer):
    is_published = serializers.BooleanField()
