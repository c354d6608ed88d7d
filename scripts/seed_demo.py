import os
import sys
from decimal import Decimal

import django

# --- Fix project path ---
BASE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "backend")
sys.path.append(BASE_DIR)

# --- Set Django settings ---
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "quadro_backend.settings.dev")
django.setup()

from catalog.models import Category, Product
from identity.models import User, UserRole
from marketing.models import Discount, DiscountType
from platformapp.models import Tenant
from platformapp.services.tenants import create_tenant

DEMO_SLUG = "demo-store"
DEMO_ADMIN = ("admin@demo.store", "demo-admin-pass")

CATALOG = {
    "Coffee": [
        ("Espresso beans 500g", "COF-ESP-500", "18.50", 40),
        ("Filter blend 1kg", "COF-FIL-1K", "29.90", 12),
    ],
    "Gear": [
        ("Pour-over dripper", "GEA-DRIP", "24.00", 8),
        ("Burr grinder", "GEA-GRND", "89.00", 3),
    ],
}


def seed_demo():
    tenant = Tenant.objects.filter(slug=DEMO_SLUG).first()
    if tenant is None:
        tenant = create_tenant(name="Demo Store", slug=DEMO_SLUG)
        print(f"🏪 Created tenant {tenant.slug} ({tenant.pk})")
    else:
        print(f"↻ Reusing tenant {tenant.slug} ({tenant.pk})")

    email, password = DEMO_ADMIN
    if not User.objects.filter(tenant=tenant, email=email).exists():
        User.objects.create_user(email=email, password=password, name="Demo Admin",
                                 role=UserRole.ADMIN, tenant=tenant)
        print(f"👤 Created admin {email}")

    for cat_name, products in CATALOG.items():
        category, _ = Category.objects.get_or_create(tenant=tenant, name=cat_name)
        for name, sku, price, stock in products:
            product, created = Product.objects.update_or_create(
                tenant=tenant,
                sku=sku,
                defaults={
                    "name": name,
                    "category": category,
                    "price": Decimal(price),
                    "stock": stock,
                    "min_stock": 5,
                    "is_published": True,
                },
            )
            print(f"{'🛍️ Created' if created else '↻ Updated'} {product.name}")

    Discount.objects.get_or_create(
        tenant=tenant,
        code="WELCOME10",
        defaults={"type": DiscountType.PERCENTAGE, "value": Decimal("10"), "description": "10% off"},
    )

    print(f"✅ Seed complete: log in at /api/v1/auth/login with tenant_id={tenant.pk}")


if __name__ == "__main__":
    seed_demo()
