from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from common.exceptions import InvalidDiscount
from marketing import discounts
from marketing.models import Discount, DiscountType

pytestmark = pytest.mark.django_db


def test_percentage_amount(tenant, discount):
    quote = discounts.validate(tenant.pk, "10off", Decimal("50.00"))
    assert quote.valid is True
    assert quote.discount == discount
    assert quote.discount_amount == Decimal("5.00")


def test_fixed_amount_is_capped_at_order_amount(tenant):
    Discount.objects.create(tenant=tenant, code="BIG", type=DiscountType.FIXED, value=Decimal("80"))
    assert discounts.validate(tenant.pk, "BIG", Decimal("50")).discount_amount == Decimal("50.00")
    assert discounts.validate(tenant.pk, "BIG", Decimal("100")).discount_amount == Decimal("80.00")


def test_percentage_rounds_half_up(tenant):
    Discount.objects.create(tenant=tenant, code="THIRD", type=DiscountType.PERCENTAGE, value=Decimal("12.5"))
    # 0.99 * 12.5% = 0.12375
    assert discounts.validate(tenant.pk, "THIRD", Decimal("0.99")).discount_amount == Decimal("0.12")


def test_validate_does_not_consume_uses(tenant, discount):
    discounts.validate(tenant.pk, "10OFF", Decimal("50"))
    discount.refresh_from_db()
    assert discount.used_count == 0


def test_unknown_code(tenant, discount):
    with pytest.raises(InvalidDiscount):
        discounts.validate(tenant.pk, "NOPE", Decimal("50"))


def test_code_is_tenant_scoped(other_tenant, discount):
    with pytest.raises(InvalidDiscount):
        discounts.validate(other_tenant.pk, "10OFF", Decimal("50"))


def test_inactive(tenant, discount):
    Discount.objects.filter(pk=discount.pk).update(active=False)
    with pytest.raises(InvalidDiscount):
        discounts.validate(tenant.pk, "10OFF", Decimal("50"))


def test_not_started(tenant, discount):
    now = timezone.now()
    Discount.objects.filter(pk=discount.pk).update(start_date=now + timedelta(days=1))
    with pytest.raises(InvalidDiscount):
        discounts.validate(tenant.pk, "10OFF", Decimal("50"), now=now)


def test_expired(tenant, discount):
    now = timezone.now()
    Discount.objects.filter(pk=discount.pk).update(end_date=now - timedelta(seconds=1))
    with pytest.raises(InvalidDiscount):
        discounts.validate(tenant.pk, "10OFF", Decimal("50"), now=now)


def test_inside_window(tenant, discount):
    now = timezone.now()
    Discount.objects.filter(pk=discount.pk).update(start_date=now - timedelta(days=1),
                                                   end_date=now + timedelta(days=1))
    assert discounts.validate(tenant.pk, "10OFF", Decimal("50"), now=now).valid


def test_usage_limit_reached(tenant, discount):
    Discount.objects.filter(pk=discount.pk).update(usage_limit=2, used_count=2)
    with pytest.raises(InvalidDiscount):
        discounts.validate(tenant.pk, "10OFF", Decimal("50"))


def test_below_minimum_order_amount(tenant, discount):
    Discount.objects.filter(pk=discount.pk).update(minimum_order_amount=Decimal("60"))
    with pytest.raises(InvalidDiscount):
        discounts.validate(tenant.pk, "10OFF", Decimal("59.99"))
    assert discounts.validate(tenant.pk, "10OFF", Decimal("60")).discount_amount == Decimal("6.00")


def test_release_never_goes_negative(discount):
    discounts.apply(discount.pk)
    discounts.release(discount.pk)
    discounts.release(discount.pk)
    discount.refresh_from_db()
    assert discount.used_count == 0


def test_code_saved_upper_case(tenant):
    d = Discount.objects.create(tenant=tenant, code=" summer ", type=DiscountType.FIXED, value=Decimal("5"))
    assert d.code == "SUMMER"
