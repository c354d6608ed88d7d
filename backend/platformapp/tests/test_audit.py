from datetime import timedelta
from unittest import mock

import pytest
from django.utils import timezone

from common.exceptions import Conflict
from conftest import tenant_url
from platformapp.models import AuditLog
from platformapp.services import audit

pytestmark = pytest.mark.django_db


def test_log_success(tenant, admin_user):
    entry = audit.log_success(tenant_id=tenant.pk, action="PRODUCT_CREATE", resource="Product",
                              resource_id="p-1", user_id=admin_user.pk, metadata={"name": "Beans"})
    assert entry.pk
    assert entry.user_id == admin_user.pk
    assert entry.metadata == {"name": "Beans"}


def test_log_error_suffixes_action(tenant):
    entry = audit.log_error(tenant_id=tenant.pk, action="CATEGORY_DELETE", resource="Category",
                            error=Conflict("Cannot delete"), metadata={"id": 1})
    assert entry.action == "CATEGORY_DELETE_FAILED"
    assert entry.metadata == {"id": 1, "error": {"message": "Cannot delete", "code": "conflict"}}


def test_log_update_and_delete_shapes(tenant):
    upd = audit.log_update(tenant_id=tenant.pk, action="X_UPDATE", resource="X", resource_id=1,
                           before={"a": 1}, after={"a": 2})
    assert upd.metadata == {"before": {"a": 1}, "after": {"a": 2}}
    dele = audit.log_delete(tenant_id=tenant.pk, action="X_DELETE", resource="X", resource_id=1,
                            deleted={"a": 2})
    assert dele.metadata == {"deletedData": {"a": 2}}


def test_secrets_are_redacted(tenant):
    entry = audit.log_success(tenant_id=tenant.pk, action="USER_CREATE", resource="User",
                              metadata={"email": "a@b.c", "password": "hunter22", "nested": [{"token": "x"}]})
    assert entry.metadata == {"email": "a@b.c", "password": "***", "nested": [{"token": "***"}]}


def test_write_failure_is_swallowed(tenant, caplog):
    with mock.patch.object(AuditLog.objects, "create", side_effect=RuntimeError("disk full")):
        result = audit.log_success(tenant_id=tenant.pk, action="PRODUCT_CREATE", resource="Product")
    assert result is None
    assert "Failed to write audit log PRODUCT_CREATE" in caplog.text


def test_request_origin_prefers_forwarded_for(rf):
    request = rf.get("/", HTTP_X_FORWARDED_FOR="203.0.113.9, 10.0.0.1", HTTP_USER_AGENT="curl/8")
    assert audit.request_origin(request) == {"ip_address": "203.0.113.9", "user_agent": "curl/8"}


# ---------- Read side ----------
@pytest.fixture
def entries(tenant, other_tenant, admin_user):
    audit.log_success(tenant_id=tenant.pk, action="PRODUCT_CREATE", resource="Product", user_id=admin_user.pk)
    audit.log_success(tenant_id=tenant.pk, action="PRODUCT_UPDATE", resource="Product")
    audit.log_success(tenant_id=tenant.pk, action="ORDER_CREATE", resource="Order")
    audit.log_success(tenant_id=other_tenant.pk, action="PRODUCT_CREATE", resource="Product")


def test_logs_admin_only(staff_client, anon_client, tenant, entries):
    assert staff_client.get(tenant_url(tenant, "logs")).status_code == 403
    assert anon_client.get(tenant_url(tenant, "logs")).status_code == 401


def test_logs_list_is_tenant_scoped_and_unpaginated(admin_client, tenant, entries):
    res = admin_client.get(tenant_url(tenant, "logs"))
    assert res.status_code == 200
    body = res.json()
    assert isinstance(body, list)
    assert len(body) == 3
    assert body[0]["action"] == "ORDER_CREATE"


def test_logs_filters(admin_client, tenant, admin_user, entries):
    url = tenant_url(tenant, "logs")
    assert len(admin_client.get(url, {"action": "product"}).json()) == 2
    assert len(admin_client.get(url, {"resource": "Order"}).json()) == 1
    by_user = admin_client.get(url, {"user_id": str(admin_user.pk)}).json()
    assert [e["action"] for e in by_user] == ["PRODUCT_CREATE"]
    assert by_user[0]["user"]["email"] == admin_user.email
    future = (timezone.now() + timedelta(days=1)).isoformat()
    assert admin_client.get(url, {"from_date": future}).json() == []


def test_logs_paginated(admin_client, tenant, entries):
    res = admin_client.get(tenant_url(tenant, "logs/paginated"), {"page": 2, "limit": 2})
    assert res.status_code == 200
    body = res.json()
    assert len(body["data"]) == 1
    assert body["meta"] == {
        "currentPage": 2, "totalPages": 2, "totalItems": 3, "itemsPerPage": 2,
        "hasNextPage": False, "hasPreviousPage": True,
    }


def test_logs_to_date_keeps_the_whole_day(admin_client, tenant, entries):
    url = tenant_url(tenant, "logs")
    today = timezone.localdate().isoformat()
    assert len(admin_client.get(url, {"to_date": today}).json()) == 3
    assert len(admin_client.get(url, {"from_date": today}).json()) == 3
