from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from common.models import BaseModel


class Category(BaseModel):
    tenant = models.ForeignKey("platformapp.Tenant", on_delete=models.CASCADE, related_name="categories")
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ("name",)
        constraints = [
            models.UniqueConstraint(fields=["tenant", "name"], name="uniq_category_name_per_tenant"),
        ]

    def __str__(self):
        return self.name


class ProductQuerySet(models.QuerySet):
    def low_stock(self):
        return self.filter(min_stock__isnull=False, stock__lte=F("min_stock"))


class Product(BaseModel):
    tenant   = models.ForeignKey("platformapp.Tenant", on_delete=models.CASCADE, related_name="products")
    category = models.ForeignKey("catalog.Category", on_delete=models.SET_NULL, null=True, blank=True,
                                 related_name="products")

    name        = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    sku         = models.CharField(max_length=120, blank=True, null=True)
    image_url   = models.URLField(max_length=500, blank=True, null=True)

    price     = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    # Orders move stock only through inventory.ledger
    stock     = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    min_stock = models.IntegerField(blank=True, null=True, validators=[MinValueValidator(0)])

    is_published = models.BooleanField(default=False)

    objects = ProductQuerySet.as_manager()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["tenant", "sku"], name="uniq_product_sku_per_tenant"),
            models.CheckConstraint(condition=Q(stock__gte=0), name="product_stock_non_negative"),
        ]
        indexes = [
            models.Index(fields=["tenant", "is_published", "-created_at"]),
            models.Index(fields=["tenant", "category"]),
            models.Index(fields=["name"]),
        ]

    def __str__(self):
        return self.name

    @property
    def is_low_stock(self):
        return self.min_stock is not None and self.stock <= self.min_stock
