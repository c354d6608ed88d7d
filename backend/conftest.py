from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from catalog.models import Category, Product
from identity.models import User, UserRole
from identity.services import issue_tokens
from marketing.models import Discount, DiscountType
from platformapp.services.tenants import create_tenant

PASSWORD = "Sturdy-pass-2024"


def make_user(tenant, email, role=UserRole.STAFF, **extra):
    return User.objects.create_user(
        email=email, password=PASSWORD, name=email.split("@")[0].title(), role=role, tenant=tenant, **extra
    )


def client_for(user=None):
    client = APIClient()
    if user is not None:
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_tokens(user)['access_token']}")
    return client


def tenant_url(tenant, path=""):
    return f"/api/v1/tenants/{tenant.pk}/{path}"


# ---------- Tenants & people ----------
@pytest.fixture
def tenant(db):
    return create_tenant(name="Acme Coffee", slug="acme")


@pytest.fixture
def other_tenant(db):
    return create_tenant(name="Other Store", slug="other")


@pytest.fixture
def admin_user(tenant):
    return make_user(tenant, "owner@acme.test", role=UserRole.ADMIN)


@pytest.fixture
def staff_user(tenant):
    return make_user(tenant, "clerk@acme.test")


@pytest.fixture
def outsider(other_tenant):
    return make_user(other_tenant, "admin@other.test", role=UserRole.ADMIN)


@pytest.fixture
def platform_staff(db):
    return User.objects.create_superuser(email="root@platform.test", password=PASSWORD, name="Root")


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def staff_client(staff_user):
    return client_for(staff_user)


@pytest.fixture
def outsider_client(outsider):
    return client_for(outsider)


@pytest.fixture
def platform_client(platform_staff):
    return client_for(platform_staff)


@pytest.fixture
def anon_client():
    return client_for()


# ---------- Catalog & discounts ----------
@pytest.fixture
def category(tenant):
    return Category.objects.create(tenant=tenant, name="Coffee")


@pytest.fixture
def product_a(tenant, category):
    return Product.objects.create(tenant=tenant, category=category, name="Beans", sku="A-1",
                                  price=Decimal("10.00"), stock=5, is_published=True)


@pytest.fixture
def product_b(tenant, category):
    return Product.objects.create(tenant=tenant, category=category, name="Grinder", sku="B-1",
                                  price=Decimal("20.00"), stock=2, is_published=True)


@pytest.fixture
def discount(tenant):
    return Discount.objects.create(tenant=tenant, code="10OFF", type=DiscountType.PERCENTAGE,
                                   value=Decimal("10"), minimum_order_amount=Decimal("0"))
