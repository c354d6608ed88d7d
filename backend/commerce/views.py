from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from common.mixins import TenantScopedModelViewSet, AuditedActionsMixin
from common.permissions import PrivateTenantOnly
from platformapp.constants import AuditAction, AuditResource
from . import services
from .filters import OrderFilter
from .models import Order
from .serializers import OrderSerializer, OrderCreateSerializer, OrderUpdateSerializer, OrderStatusSerializer


class OrderViewSet(AuditedActionsMixin, TenantScopedModelViewSet):
    """
    POST   orders              → place an order (stock + discount, atomic)
    PATCH  orders/<id>         → descriptive fields only
    PATCH  orders/<id>/status  → pending → paid | cancelled, paid → cancelled
    DELETE orders/<id>         → cancel (200 with the order)
    """
    permission_classes = [PrivateTenantOnly]
    queryset = (
        Order.objects
        .select_related("customer", "discount")
        .prefetch_related("items__product__category")
    )
    filterset_class = OrderFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    ordering_fields = ("created_at", "total", "status")

    audit_resource = AuditResource.ORDER
    audit_actions = {"update": AuditAction.ORDER_UPDATE}

    def get_serializer_class(self):
        if self.action == "partial_update":
            return OrderUpdateSerializer
        return OrderSerializer

    def create(self, request, *args, **kwargs):
        ser = OrderCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = services.create_order(tenant_id=self.tenant.pk, request=request, **ser.validated_data)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        order = self.get_object()
        ser = OrderUpdateSerializer(order, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        self.perform_update(ser)
        return Response(OrderSerializer(services.hydrate(order.pk)).data)

    def destroy(self, request, *args, **kwargs):
        order = services.cancel_order(tenant_id=self.tenant.pk, order_id=kwargs["pk"], request=request)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["patch"], url_path="status")
    def set_status(self, request, tenant_id=None, pk=None):
        ser = OrderStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        order = services.update_status(
            tenant_id=self.tenant.pk, order_id=pk, status=ser.validated_data["status"], request=request,
        )
        return Response(OrderSerializer(order).data)
