from django.db import models
from common.models import BaseModel


class Customer(BaseModel):
    """
    Buyer record (private to the tenant). Orders may reference one or carry free-text details.
    """
    tenant = models.ForeignKey("platformapp.Tenant", on_delete=models.CASCADE, related_name="customers")

    name    = models.CharField(max_length=200)
    email   = models.EmailField()
    phone   = models.CharField(max_length=32, blank=True, null=True)
    address = models.TextField(blank=True, null=True)

    class Meta:
        indexes = [
            models.Index(fields=["tenant", "email"]),
            models.Index(fields=["tenant", "-created_at"]),
        ]
        constraints = [
            models.UniqueConstraint(fields=["tenant", "email"], name="uniq_customer_email_per_tenant"),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}>"
