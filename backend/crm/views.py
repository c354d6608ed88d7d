from django.db.models import Count

from common.exceptions import Conflict
from common.mixins import TenantScopedModelViewSet, AuditedActionsMixin
from common.permissions import PrivateTenantOnly, AdminDeleteOnly  # auth + tenant membership for all methods
from platformapp.constants import AuditAction, AuditResource

from .models import Customer
from .serializers import CustomerSerializer


# ---------- Private ViewSets (no public browse) ----------
class CustomerViewSet(AuditedActionsMixin, TenantScopedModelViewSet):
    permission_classes = [PrivateTenantOnly, AdminDeleteOnly]
    queryset = Customer.objects.annotate(order_count=Count("orders"))
    serializer_class = CustomerSerializer
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    search_fields = ("name", "email")
    ordering_fields = ("created_at", "updated_at", "name")
    conflict_message = "Customer with this email already exists"

    audit_resource = AuditResource.CUSTOMER
    audit_actions = {
        "create": AuditAction.CUSTOMER_CREATE,
        "update": AuditAction.CUSTOMER_UPDATE,
        "delete": AuditAction.CUSTOMER_DELETE,
    }

    def check_destroy(self, instance):
        count = instance.orders.count()
        if count:
            raise Conflict(f"Cannot delete customer with {count} associated orders")
