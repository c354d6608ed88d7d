from decimal import Decimal

from django.db.models import Sum
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from common.exceptions import Conflict, NotFound, InvalidDiscount
from common.mixins import TenantScopedModelViewSet, AuditedActionsMixin
from common.permissions import AdminWriteMemberRead
from platformapp.constants import AuditAction, AuditResource
from platformapp.services import audit
from . import discounts
from .models import Discount
from .serializers import DiscountSerializer, DiscountValidateSerializer


class DiscountViewSet(AuditedActionsMixin, TenantScopedModelViewSet):
    """
    Members read, admins write.
    POST discounts/validate is public and read-only (dry run, no usage consumed).
    """
    queryset = Discount.objects.all()
    serializer_class = DiscountSerializer
    permission_classes = [AdminWriteMemberRead]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    filterset_fields = ["active", "type"]
    search_fields = ("code", "description")
    ordering_fields = ("created_at", "code", "used_count")
    conflict_message = "Discount code already exists for this tenant"

    audit_resource = AuditResource.DISCOUNT
    audit_actions = {
        "create": AuditAction.DISCOUNT_CREATE,
        "update": AuditAction.DISCOUNT_UPDATE,
        "delete": AuditAction.DISCOUNT_DELETE,
    }

    def get_permissions(self):
        if self.action == "validate":
            return [AllowAny()]
        return super().get_permissions()

    def check_destroy(self, instance):
        count = instance.orders.count()
        if count:
            raise Conflict(f"Cannot delete discount with {count} associated orders")

    @action(detail=False, methods=["post"])
    def validate(self, request, tenant_id=None):
        ser = DiscountValidateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        code = discounts.normalize_code(ser.validated_data["code"])
        try:
            quote = discounts.validate(self.tenant.pk, code, ser.validated_data["order_amount"])
        except InvalidDiscount as exc:
            audit.log_error(tenant_id=self.tenant.pk, action=AuditAction.DISCOUNT_VALIDATE,
                            resource=AuditResource.DISCOUNT, error=exc, request=request, metadata={"code": code})
            raise NotFound(InvalidDiscount.default_detail)
        audit.log_success(tenant_id=self.tenant.pk, action=AuditAction.DISCOUNT_VALIDATE,
                          resource=AuditResource.DISCOUNT, resource_id=quote.discount.pk, request=request,
                          metadata={"code": code, "discount_amount": quote.discount_amount})
        return Response({
            "valid": quote.valid,
            "discount": DiscountSerializer(quote.discount).data,
            "discount_amount": str(quote.discount_amount),
        })

    @action(detail=False, methods=["get"], url_path=r"by-code/(?P<code>[^/]+)")
    def by_code(self, request, tenant_id=None, code=None):
        discount = self.get_queryset().filter(code=discounts.normalize_code(code)).first()
        if discount is None:
            raise NotFound(f"Discount with code {discounts.normalize_code(code)} not found")
        return Response(self.get_serializer(discount).data)

    @action(detail=True, methods=["get"])
    def stats(self, request, tenant_id=None, pk=None):
        # Import locally: commerce depends on marketing, not the other way round
        from commerce.models import Order, OrderStatus
        from commerce.serializers import OrderSummarySerializer

        discount = self.get_object()
        orders = Order.objects.filter(tenant=self.tenant, discount=discount)
        live = orders.exclude(status=OrderStatus.CANCELLED)
        total_saved = live.aggregate(s=Sum("discount_amount"))["s"] or Decimal("0")
        total_revenue = orders.filter(status=OrderStatus.PAID).aggregate(s=Sum("total"))["s"] or Decimal("0")
        recent = orders.select_related("customer").order_by("-created_at")[:10]
        return Response({
            "discount": self.get_serializer(discount).data,
            "total_uses": discount.used_count,
            "remaining_uses": discount.remaining_uses,
            "total_saved": str(total_saved),
            "total_revenue": str(total_revenue),
            "recent_orders": OrderSummarySerializer(recent, many=True).data,
        })
