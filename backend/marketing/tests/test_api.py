from decimal import Decimal

import pytest

from commerce import services as orders
from conftest import tenant_url
from marketing.models import Discount
from platformapp.models import AuditLog

pytestmark = pytest.mark.django_db


def test_admin_creates_discount(admin_client, tenant):
    res = admin_client.post(tenant_url(tenant, "discounts"),
                            {"code": "summer", "type": "fixed", "value": "7.50"}, format="json")
    assert res.status_code == 201, res.content
    assert res.json()["code"] == "SUMMER"
    assert res.json()["used_count"] == 0


def test_staff_reads_but_cannot_write(staff_client, tenant, discount):
    assert staff_client.get(tenant_url(tenant, "discounts")).status_code == 200
    res = staff_client.post(tenant_url(tenant, "discounts"),
                            {"code": "X", "type": "fixed", "value": "1"}, format="json")
    assert res.status_code == 403


def test_duplicate_code_is_409(admin_client, tenant, discount):
    res = admin_client.post(tenant_url(tenant, "discounts"),
                            {"code": "10off", "type": "fixed", "value": "1"}, format="json")
    assert res.status_code == 409
    assert res.json()["detail"] == "Discount code already exists for this tenant"


def test_percentage_over_100_rejected(admin_client, tenant):
    res = admin_client.post(tenant_url(tenant, "discounts"),
                            {"code": "ALL", "type": "percentage", "value": "150"}, format="json")
    assert res.status_code == 400
    assert "value" in res.json()


def test_end_before_start_rejected(admin_client, tenant):
    res = admin_client.post(tenant_url(tenant, "discounts"), {
        "code": "WIN", "type": "fixed", "value": "1",
        "start_date": "2026-02-01T00:00:00Z", "end_date": "2026-01-01T00:00:00Z",
    }, format="json")
    assert res.status_code == 400
    assert "end_date" in res.json()


def test_validate_is_public_and_read_only(anon_client, tenant, discount):
    res = anon_client.post(tenant_url(tenant, "discounts/validate"),
                           {"code": "10off", "order_amount": "50.00"}, format="json")
    assert res.status_code == 200, res.content
    body = res.json()
    assert body["valid"] is True
    assert Decimal(body["discount_amount"]) == Decimal("5.00")
    assert body["discount"]["code"] == "10OFF"
    discount.refresh_from_db()
    assert discount.used_count == 0
    assert AuditLog.objects.filter(action="DISCOUNT_VALIDATE").exists()


def test_validate_invalid_is_404(anon_client, tenant, discount):
    Discount.objects.filter(pk=discount.pk).update(minimum_order_amount=Decimal("100"))
    res = anon_client.post(tenant_url(tenant, "discounts/validate"),
                           {"code": "10OFF", "order_amount": "50.00"}, format="json")
    assert res.status_code == 404
    assert res.json()["detail"] == "Invalid or expired discount code"
    assert AuditLog.objects.filter(action="DISCOUNT_VALIDATE_FAILED").exists()


def test_by_code(staff_client, tenant, discount):
    res = staff_client.get(tenant_url(tenant, "discounts/by-code/10off"))
    assert res.status_code == 200
    assert res.json()["id"] == str(discount.pk)
    assert staff_client.get(tenant_url(tenant, "discounts/by-code/NOPE")).status_code == 404


def test_stats(admin_client, tenant, discount, product_a, product_b):
    cart = [{"product_id": product_a.pk, "quantity": 3}, {"product_id": product_b.pk, "quantity": 1}]
    paid = orders.create_order(tenant_id=tenant.pk, items=cart[:1], customer_name="Ana", discount_code="10OFF")
    orders.update_status(tenant_id=tenant.pk, order_id=paid.pk, status="paid")
    dropped = orders.create_order(tenant_id=tenant.pk, items=cart[1:], customer_name="Ben", discount_code="10OFF")
    orders.cancel_order(tenant_id=tenant.pk, order_id=dropped.pk)

    res = admin_client.get(tenant_url(tenant, f"discounts/{discount.pk}/stats"))
    assert res.status_code == 200
    body = res.json()
    assert body["total_uses"] == 1
    assert body["remaining_uses"] is None
    assert Decimal(body["total_saved"]) == Decimal("3.00")
    assert Decimal(body["total_revenue"]) == Decimal("27.00")
    assert len(body["recent_orders"]) == 2


def test_discount_with_orders_cannot_be_deleted(admin_client, tenant, discount, product_a):
    orders.create_order(tenant_id=tenant.pk, items=[{"product_id": product_a.pk, "quantity": 1}],
                        customer_name="Ana", discount_code="10OFF")
    res = admin_client.delete(tenant_url(tenant, f"discounts/{discount.pk}"))
    assert res.status_code == 409
    assert res.json()["detail"] == "Cannot delete discount with 1 associated orders"
