from rest_framework import serializers
from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    order_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Customer
        fields = ("id", "name", "email", "phone", "address", "order_count", "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_email(self, value):
        return value.strip().lower()


class CustomerBriefSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ("id", "name", "email")
