from rest_framework import serializers
from .models import Tenant, TenantSettings, AuditLog


class TenantSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tenant
        fields = ("id", "name", "slug", "is_active", "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")
        # Uniqueness is reported as 409 by the service layer
        extra_kwargs = {"slug": {"validators": []}}


class TenantPublicSerializer(serializers.ModelSerializer):
    class Meta:
        model = Tenant
        fields = ("id", "name", "slug")


class TenantSettingsSerializer(serializers.ModelSerializer):
    tenant_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = TenantSettings
        fields = (
            "id", "tenant_id", "company_name", "company_logo_url", "currency",
            "locale", "timezone", "invoice_prefix", "created_at", "updated_at",
        )
        read_only_fields = ("id", "tenant_id", "created_at", "updated_at")

    def validate_currency(self, value):
        return value.upper()


class AuditActorSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    email = serializers.EmailField()
    name = serializers.CharField()


class AuditLogSerializer(serializers.ModelSerializer):
    tenant_id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)
    user = AuditActorSerializer(read_only=True, allow_null=True)

    class Meta:
        model = AuditLog
        fields = (
            "id", "tenant_id", "user_id", "user", "action", "resource", "resource_id",
            "metadata", "ip_address", "user_agent", "created_at",
        )
