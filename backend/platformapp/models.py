from django.conf import settings
from django.db import models
from common.models import BaseModel

from .defaults import DEFAULT_SETTINGS


class Tenant(BaseModel):
    slug = models.SlugField(max_length=100, unique=True)
    name = models.CharField(max_length=200)
    # Tenants are deactivated, never deleted
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self):
        return self.slug


class TenantSettings(BaseModel):
    tenant = models.OneToOneField("platformapp.Tenant", on_delete=models.CASCADE, related_name="settings")
    company_name = models.CharField(max_length=200)
    company_logo_url = models.URLField(max_length=500, blank=True, null=True)
    currency = models.CharField(max_length=3, default=DEFAULT_SETTINGS["currency"])
    locale = models.CharField(max_length=10, default=DEFAULT_SETTINGS["locale"])
    timezone = models.CharField(max_length=64, default=DEFAULT_SETTINGS["timezone"])
    invoice_prefix = models.CharField(max_length=20, default=DEFAULT_SETTINGS["invoice_prefix"])

    def __str__(self):
        return f"settings:{self.tenant_id}"


class AuditLog(models.Model):
    """Append-only trail of state-changing actions."""
    id = models.BigAutoField(primary_key=True)
    tenant = models.ForeignKey("platformapp.Tenant", on_delete=models.CASCADE, related_name="audit_logs",
                               blank=True, null=True)
    # No DB constraint: the actor may be unknown (failed logins) or later deactivated
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.DO_NOTHING, db_constraint=False,
                             related_name="+", blank=True, null=True)
    action = models.CharField(max_length=80)          # e.g. "ORDER_CREATE"
    resource = models.CharField(max_length=60)        # e.g. "Order"
    resource_id = models.CharField(max_length=120, blank=True, null=True)
    metadata = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(blank=True, null=True)
    user_agent = models.CharField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [
            models.Index(fields=["tenant", "-created_at"]),
            models.Index(fields=["tenant", "resource"]),
            models.Index(fields=["tenant", "user"]),
        ]

    def __str__(self):
        return f"{self.action} {self.resource}:{self.resource_id}"
