import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from conftest import tenant_url
from platformapp.models import AuditLog, Tenant, TenantSettings

pytestmark = pytest.mark.django_db

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


# ---------- Tenants ----------
def test_create_tenant_creates_default_settings(platform_client):
    res = platform_client.post("/api/v1/tenants", {"name": "Blue Shop", "slug": "blue"}, format="json")
    assert res.status_code == 201, res.content
    tenant = Tenant.objects.get(slug="blue")
    settings = TenantSettings.objects.get(tenant=tenant)
    assert settings.company_name == "Blue Shop"
    assert (settings.currency, settings.locale, settings.timezone, settings.invoice_prefix) == \
        ("COP", "es-CO", "UTC", "INV-")
    assert AuditLog.objects.filter(action="TENANT_CREATE", tenant=tenant).exists()


def test_duplicate_slug_is_409(platform_client, tenant):
    res = platform_client.post("/api/v1/tenants", {"name": "Again", "slug": "acme"}, format="json")
    assert res.status_code == 409
    assert res.json()["detail"] == "Tenant slug already exists"


def test_tenant_admin_cannot_manage_tenants(admin_client, tenant):
    assert admin_client.get("/api/v1/tenants").status_code == 403
    assert admin_client.post("/api/v1/tenants", {"name": "X", "slug": "x"}, format="json").status_code == 403


def test_member_reads_own_tenant(staff_client, tenant, other_tenant):
    assert staff_client.get(f"/api/v1/tenants/{tenant.pk}").json()["slug"] == "acme"
    assert staff_client.get(f"/api/v1/tenants/{other_tenant.pk}").status_code == 403


def test_public_lookup_by_slug(anon_client, tenant):
    res = anon_client.get("/api/v1/tenants/slug/acme")
    assert res.status_code == 200
    assert res.json() == {"id": str(tenant.pk), "name": "Acme Coffee", "slug": "acme"}
    assert anon_client.get("/api/v1/tenants/slug/missing").status_code == 404


def test_delete_deactivates(platform_client, tenant):
    res = platform_client.delete(f"/api/v1/tenants/{tenant.pk}")
    assert res.status_code == 200
    assert res.json()["is_active"] is False
    assert Tenant.objects.filter(pk=tenant.pk).exists()


def test_inactive_tenant_routes_are_404(platform_client, tenant):
    platform_client.delete(f"/api/v1/tenants/{tenant.pk}")
    assert platform_client.get(tenant_url(tenant, "catalog/products")).status_code == 404


def test_rename_slug_conflict(platform_client, tenant, other_tenant):
    res = platform_client.patch(f"/api/v1/tenants/{tenant.pk}", {"slug": "other"}, format="json")
    assert res.status_code == 409


# ---------- Settings ----------
def test_settings_read_and_patch(admin_client, tenant):
    res = admin_client.get(tenant_url(tenant, "settings"))
    assert res.status_code == 200
    assert res.json()["company_name"] == "Acme Coffee"

    res = admin_client.patch(tenant_url(tenant, "settings"), {"currency": "usd"}, format="json")
    assert res.status_code == 200
    assert res.json()["currency"] == "USD"
    entry = AuditLog.objects.get(action="SETTINGS_UPDATE")
    assert entry.metadata["before"]["currency"] == "COP"
    assert entry.metadata["after"]["currency"] == "USD"


def test_settings_admin_only(staff_client, tenant):
    assert staff_client.get(tenant_url(tenant, "settings")).status_code == 403


def test_settings_create_conflict_and_delete(admin_client, tenant):
    res = admin_client.post(tenant_url(tenant, "settings"), {"company_name": "Dup"}, format="json")
    assert res.status_code == 409
    assert res.json()["detail"] == "Settings already exist for this tenant"

    assert admin_client.delete(tenant_url(tenant, "settings")).status_code == 204
    res = admin_client.get(tenant_url(tenant, "settings"))
    assert res.status_code == 404
    assert res.json()["detail"] == "Settings not found for this tenant"

    res = admin_client.post(tenant_url(tenant, "settings"), {"company_name": "Fresh"}, format="json")
    assert res.status_code == 201
    assert res.json()["currency"] == "COP"


def test_logo_upload(admin_client, tenant):
    upload = SimpleUploadedFile("logo.png", PNG, content_type="image/png")
    res = admin_client.post(tenant_url(tenant, "settings/logo"), {"file": upload}, format="multipart")
    assert res.status_code == 200, res.content
    url = res.json()["company_logo_url"]
    assert "/media/logos/" in url and url.endswith(".png")


def test_logo_upload_rejects_non_images(admin_client, tenant):
    upload = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
    res = admin_client.post(tenant_url(tenant, "settings/logo"), {"file": upload}, format="multipart")
    assert res.status_code == 400


def test_logo_upload_rejects_svg(admin_client, tenant):
    svg = b'<svg xmlns="http://www.w3.org/2000/svg"><script>alert(1)</script></svg>'
    upload = SimpleUploadedFile("logo.svg", svg, content_type="image/svg+xml")
    res = admin_client.post(tenant_url(tenant, "settings/logo"), {"file": upload}, format="multipart")
    assert res.status_code == 400
    assert res.json()["detail"] == "Unsupported file type: image/svg+xml"
