"""
Stock ledger for catalog products.

All three operations expect to run inside the caller's transaction.atomic()
block: reserve() takes the row lock, decrement()/increment() adjust the
counter in SQL so concurrent orders never lose an update.
"""
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import F

from catalog.models import Product
from common.exceptions import ProductNotFound, ProductNotPublished, InsufficientStock


def reserve(product_id, tenant_id, quantity: int) -> Product:
    """
    Lock the product row and check it can cover `quantity`.
    Returns the locked Product. Does not change stock.
    """
    try:
        product = (
            Product.objects
            .select_for_update()
            .filter(pk=product_id, tenant_id=tenant_id)
            .first()
        )
    except (ValueError, DjangoValidationError):
        product = None
    if product is None:
        raise ProductNotFound(product_id)
    if not product.is_published:
        raise ProductNotPublished(product_id)
    if product.stock < quantity:
        raise InsufficientStock(product.name, product.stock, quantity)
    return product


def decrement(product_id, quantity: int) -> None:
    """Take `quantity` units out. Callers reserve() first."""
    Product.objects.filter(pk=product_id).update(stock=F("stock") - quantity)


def increment(product_id, quantity: int) -> None:
    """Put `quantity` units back, e.g. when an order is cancelled."""
    Product.objects.filter(pk=product_id).update(stock=F("stock") + quantity)
