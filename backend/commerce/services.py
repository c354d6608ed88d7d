"""
Order workflow: placing orders and moving them through their statuses.

Every operation runs in one transaction.atomic() block. Rows it mutates are
locked with select_for_update() (products in primary-key order, then the
discount, or the order row for status changes) so concurrent requests
serialize on what they touch. Audit entries are written once the block
has committed or rolled back, and never fail the caller.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from catalog.tasks import queue_low_stock_check
from common.exceptions import NotFound, InvalidInput, InvalidTransition
from crm.models import Customer
from inventory import ledger
from marketing import discounts
from platformapp.constants import AuditAction, AuditResource
from platformapp.services import audit
from .models import Order, OrderItem, OrderStatus, ALLOWED_TRANSITIONS

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CartLine:
    product_id: object
    quantity: int


def merge_lines(items: Iterable) -> list:
    """Collapse repeated products into one line, keeping first-seen order."""
    merged = OrderedDict()
    for item in items:
        pid = item.product_id if isinstance(item, CartLine) else item["product_id"]
        qty = item.quantity if isinstance(item, CartLine) else item["quantity"]
        if qty < 1:
            raise InvalidInput("Quantity must be at least 1")
        merged[pid] = merged.get(pid, 0) + qty
    return [CartLine(product_id=pid, quantity=qty) for pid, qty in merged.items()]


def transition(current: str, target: str) -> bool:
    """
    True when current → target is a sanctioned move with effects,
    False when nothing changes (same status), InvalidTransition otherwise.
    """
    if current == target:
        return False
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransition(current, target)
    return True


def hydrate(order_id) -> Order:
    return (
        Order.objects
        .select_related("customer", "discount")
        .prefetch_related("items__product__category")
        .get(pk=order_id)
    )


def _snapshot(order: Order) -> dict:
    return {
        "status": order.status,
        "subtotal": order.subtotal,
        "discount_id": order.discount_id,
        "discount_amount": order.discount_amount,
        "total": order.total,
        "items": [
            {"product_id": it.product_id, "quantity": it.quantity, "unit_price": it.unit_price}
            for it in order.items.all()
        ],
    }


# --------------------------
# Create
# --------------------------
def create_order(*, tenant_id, items, customer_name: Optional[str] = None, customer_email: Optional[str] = None,
                 customer_id=None, discount_code: Optional[str] = None, shipping_address: Optional[str] = None,
                 notes: Optional[str] = None, now=None, request=None) -> Order:
    """
    Reserve stock for every line, price the cart, apply an optional discount
    and persist the order with its items, all or nothing.
    """
    try:
        order, quote = _create_order_atomic(
            tenant_id=tenant_id, items=items, customer_name=customer_name, customer_email=customer_email,
            customer_id=customer_id, discount_code=discount_code, shipping_address=shipping_address,
            notes=notes, now=now,
        )
    except Exception as exc:
        audit.log_error(tenant_id=tenant_id, action=AuditAction.ORDER_CREATE, resource=AuditResource.ORDER,
                        error=exc, request=request, metadata={"discount_code": discount_code})
        raise

    logger.info("Order %s created for tenant %s: subtotal=%s total=%s",
                order.pk, tenant_id, order.subtotal, order.total)
    audit.log_success(tenant_id=tenant_id, action=AuditAction.ORDER_CREATE, resource=AuditResource.ORDER,
                      resource_id=order.pk, request=request, metadata=_snapshot(order))
    if quote is not None:
        audit.log_success(tenant_id=tenant_id, action=AuditAction.DISCOUNT_APPLY, resource=AuditResource.DISCOUNT,
                          resource_id=quote.discount.pk, request=request,
                          metadata={"order_id": order.pk, "discount_amount": quote.discount_amount})
    return order


def _create_order_atomic(*, tenant_id, items, customer_name, customer_email, customer_id, discount_code,
                         shipping_address, notes, now) -> Tuple[Order, Optional[discounts.DiscountQuote]]:
    lines = merge_lines(items)
    if not lines:
        raise InvalidInput("Order must contain at least one item")

    with transaction.atomic():
        customer = None
        if customer_id:
            customer = Customer.objects.filter(pk=customer_id, tenant_id=tenant_id).first()
            if customer is None:
                raise NotFound(f"Customer with ID {customer_id} not found")
        name = customer_name or (customer.name if customer else None)
        if not name:
            raise InvalidInput("customer_name is required when no customer is given")

        # Lock products in a stable order to avoid deadlocks between carts
        products = {}
        for line in sorted(lines, key=lambda ln: str(ln.product_id)):
            products[line.product_id] = ledger.reserve(line.product_id, tenant_id, line.quantity)

        subtotal = sum(
            (products[ln.product_id].price * ln.quantity for ln in lines), Decimal("0")
        ).quantize(CENT)

        quote = None
        if discount_code:
            quote = discounts.validate(tenant_id, discount_code, subtotal, now=now, lock=True)
        discount_amount = quote.discount_amount if quote else Decimal("0.00")

        try:
            order = Order.objects.create(
                tenant_id=tenant_id,
                customer=customer,
                customer_name=name,
                customer_email=customer_email or (customer.email if customer else None),
                status=OrderStatus.PENDING,
                subtotal=subtotal,
                discount=quote.discount if quote else None,
                discount_amount=discount_amount or None,
                total=subtotal - discount_amount,
                shipping_address=shipping_address,
                notes=notes,
            )
            OrderItem.objects.bulk_create([
                OrderItem(
                    tenant_id=tenant_id,
                    order=order,
                    product=products[ln.product_id],
                    quantity=ln.quantity,
                    unit_price=products[ln.product_id].price,
                    total_price=(products[ln.product_id].price * ln.quantity).quantize(CENT),
                )
                for ln in lines
            ])
        except IntegrityError:
            raise NotFound("Tenant or related entity not found")

        for ln in lines:
            ledger.decrement(ln.product_id, ln.quantity)
        if quote:
            discounts.apply(quote.discount.pk)

        product_ids = [ln.product_id for ln in lines]
        transaction.on_commit(lambda: queue_low_stock_check(tenant_id, product_ids))

    return hydrate(order.pk), quote


# --------------------------
# Status changes
# --------------------------
def update_status(*, tenant_id, order_id, status: str, request=None) -> Order:
    """
    Move an order to `status`. Cancelling puts each line's quantity back in
    stock and releases the discount use, exactly once.
    """
    action = AuditAction.ORDER_CANCEL if status == OrderStatus.CANCELLED else AuditAction.ORDER_STATUS_UPDATE
    try:
        order, previous, changed = _update_status_atomic(tenant_id=tenant_id, order_id=order_id, status=status)
    except Exception as exc:
        audit.log_error(tenant_id=tenant_id, action=action, resource=AuditResource.ORDER, resource_id=order_id,
                        error=exc, request=request, metadata={"status": status})
        raise

    if changed:
        logger.info("Order %s: %s -> %s", order.pk, previous, order.status)
        audit.log_update(tenant_id=tenant_id, action=action, resource=AuditResource.ORDER, resource_id=order.pk,
                         before={"status": previous}, after={"status": order.status}, request=request)
    return order


def _update_status_atomic(*, tenant_id, order_id, status: str) -> Tuple[Order, str, bool]:
    if status not in OrderStatus.values:
        raise InvalidInput(f"Unknown order status: {status}")

    with transaction.atomic():
        try:
            order = Order.objects.select_for_update().filter(pk=order_id, tenant_id=tenant_id).first()
        except (ValueError, DjangoValidationError):
            order = None
        if order is None:
            raise NotFound(f"Order with ID {order_id} not found")

        previous = order.status
        changed = transition(previous, status)
        if changed:
            if status == OrderStatus.CANCELLED:
                for product_id, quantity in order.items.order_by("product_id").values_list("product_id", "quantity"):
                    ledger.increment(product_id, quantity)
                if order.discount_id:
                    discounts.release(order.discount_id)
            order.status = status
            order.save(update_fields=["status", "updated_at"])

    return hydrate(order.pk), previous, changed


def cancel_order(*, tenant_id, order_id, request=None) -> Order:
    return update_status(tenant_id=tenant_id, order_id=order_id, status=OrderStatus.CANCELLED, request=request)
