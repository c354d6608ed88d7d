"""
Discount code validation and usage accounting.

validate() is read-only: it never touches used_count. The order workflow
calls it with lock=True inside its transaction and then apply()s the code,
so check and increment happen under the same row lock.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.db.models import F
from django.utils import timezone

from common.exceptions import InvalidDiscount
from .models import Discount, DiscountType

CENT = Decimal("0.01")


@dataclass(frozen=True)
class DiscountQuote:
    valid: bool
    discount: Discount
    discount_amount: Decimal


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def compute_amount(discount: Discount, order_amount: Decimal) -> Decimal:
    """percentage → amount * value / 100; fixed → min(value, amount). Never above the amount."""
    order_amount = Decimal(order_amount)
    if discount.type == DiscountType.PERCENTAGE:
        amount = order_amount * discount.value / Decimal(100)
    else:
        amount = min(discount.value, order_amount)
    amount = min(amount, order_amount)
    return max(amount, Decimal(0)).quantize(CENT, rounding=ROUND_HALF_UP)


def rejection_reason(discount: Discount, order_amount: Decimal, now: datetime) -> Optional[str]:
    if not discount.active:
        return "inactive"
    if discount.start_date and now < discount.start_date:
        return "not_started"
    if discount.end_date and now > discount.end_date:
        return "expired"
    if discount.usage_limit is not None and discount.used_count >= discount.usage_limit:
        return "usage_limit_reached"
    if discount.minimum_order_amount is not None and Decimal(order_amount) < discount.minimum_order_amount:
        return "below_minimum_order_amount"
    return None


def validate(tenant_id, code: str, order_amount, now: Optional[datetime] = None,
             lock: bool = False) -> DiscountQuote:
    """
    Check `code` against the tenant's discounts for an order of `order_amount`.
    Raises InvalidDiscount when the code is unknown, inactive, outside its window,
    used up, or the amount is under the minimum.
    """
    now = now or timezone.now()
    qs = Discount.objects.filter(tenant_id=tenant_id, code=normalize_code(code))
    if lock:
        qs = qs.select_for_update()
    discount = qs.first()
    if discount is None or rejection_reason(discount, order_amount, now):
        raise InvalidDiscount()
    return DiscountQuote(valid=True, discount=discount, discount_amount=compute_amount(discount, order_amount))


def apply(discount_id) -> None:
    Discount.objects.filter(pk=discount_id).update(used_count=F("used_count") + 1)


def release(discount_id) -> None:
    """Undo one apply(); used_count never drops below zero."""
    Discount.objects.filter(pk=discount_id, used_count__gt=0).update(used_count=F("used_count") - 1)
