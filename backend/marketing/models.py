from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from common.models import BaseModel


class DiscountType(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed amount"


class Discount(BaseModel):
    """
    Promotional code redeemable against an order subtotal.
    used_count moves with orders: +1 when applied, -1 when the order is cancelled.
    """
    tenant = models.ForeignKey("platformapp.Tenant", on_delete=models.CASCADE, related_name="discounts")
    code = models.CharField(max_length=50)   # stored upper-case
    description = models.TextField(blank=True, null=True)
    type = models.CharField(max_length=16, choices=DiscountType.choices)
    value = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    active = models.BooleanField(default=True)

    # window (either bound optional)
    start_date = models.DateTimeField(blank=True, null=True)
    end_date = models.DateTimeField(blank=True, null=True)

    # caps
    usage_limit = models.PositiveIntegerField(blank=True, null=True)
    used_count = models.PositiveIntegerField(default=0)
    minimum_order_amount = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["tenant", "code"], name="uniq_discount_code_per_tenant"),
            models.CheckConstraint(condition=Q(used_count__gte=0), name="discount_used_count_non_negative"),
        ]
        indexes = [models.Index(fields=["tenant", "active"])]

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.code

    @property
    def remaining_uses(self):
        if self.usage_limit is None:
            return None
        return max(self.usage_limit - self.used_count, 0)
