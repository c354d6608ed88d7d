# Routes nested under /api/v1/tenants/<tenant_id>/
from django.urls import path
from rest_framework.routers import SimpleRouter
from .views import AuditLogViewSet, TenantSettingsView, TenantLogoUploadView

router = SimpleRouter(trailing_slash=False)
router.register(r"logs", AuditLogViewSet, basename="auditlog")

urlpatterns = [
    path("settings", TenantSettingsView.as_view(), name="tenant-settings"),
    path("settings/logo", TenantLogoUploadView.as_view(), name="tenant-settings-logo"),
] + router.urls
