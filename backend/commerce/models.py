from django.core.validators import MinValueValidator
from django.db import models
from common.models import BaseModel


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    CANCELLED = "cancelled", "Cancelled"


# Sanctioned status moves. Anything else (besides re-requesting the
# current status) is rejected by commerce.services.transition().
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.CANCELLED},
    OrderStatus.CANCELLED: set(),
}


class Order(BaseModel):
    tenant   = models.ForeignKey("platformapp.Tenant", on_delete=models.CASCADE, related_name="orders")
    customer = models.ForeignKey("crm.Customer", on_delete=models.PROTECT, null=True, blank=True,
                                 related_name="orders")
    customer_name  = models.CharField(max_length=200)
    customer_email = models.EmailField(blank=True, null=True)

    status = models.CharField(max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING)

    subtotal        = models.DecimalField(max_digits=12, decimal_places=2)
    discount        = models.ForeignKey("marketing.Discount", on_delete=models.PROTECT, null=True, blank=True,
                                        related_name="orders")
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    total           = models.DecimalField(max_digits=12, decimal_places=2)

    shipping_address = models.TextField(blank=True, null=True)
    notes            = models.TextField(blank=True, null=True)

    class Meta:
        indexes = [
            models.Index(fields=["tenant", "status"]),
            models.Index(fields=["tenant", "customer"]),
            models.Index(fields=["tenant", "-created_at"]),
        ]

    def __str__(self):
        return f"order:{self.pk} ({self.status})"


class OrderItem(BaseModel):
    """Immutable line; unit_price is the product price when the order was placed."""
    tenant  = models.ForeignKey("platformapp.Tenant", on_delete=models.CASCADE, related_name="order_items")
    order   = models.ForeignKey("commerce.Order", on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey("catalog.Product", on_delete=models.PROTECT, related_name="order_items")
    quantity    = models.IntegerField(validators=[MinValueValidator(1)])
    unit_price  = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ("created_at",)
