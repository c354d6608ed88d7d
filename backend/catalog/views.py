from django.db import transaction
from django.db.models import Count
from rest_framework.decorators import action
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.response import Response

from common.exceptions import Conflict
from common.mixins import TenantScopedModelViewSet, AuditedActionsMixin
from common.permissions import ReadPublicWriteAuth, AdminDeleteOnly
from common.storage import upload_file
from platformapp.constants import AuditAction, AuditResource
from platformapp.permissions import IsTenantMember
from platformapp.services import audit
from .filters import ProductFilter
from .models import Category, Product
from .serializers import CategorySerializer, ProductSerializer, StockUpdateSerializer, PublishSerializer
from .tasks import queue_low_stock_check


class CategoryViewSet(AuditedActionsMixin, TenantScopedModelViewSet):
    """
    Public browse; members write; admins delete.
    """
    permission_classes = [ReadPublicWriteAuth, AdminDeleteOnly]
    queryset = Category.objects.annotate(product_count=Count("products"))
    serializer_class = CategorySerializer
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    search_fields = ("name",)
    ordering_fields = ("name", "created_at")
    default_ordering = ("name",)
    conflict_message = "Category with this name already exists"

    audit_resource = AuditResource.CATEGORY
    audit_actions = {
        "create": AuditAction.CATEGORY_CREATE,
        "update": AuditAction.CATEGORY_UPDATE,
        "delete": AuditAction.CATEGORY_DELETE,
    }

    def check_destroy(self, instance):
        count = instance.products.count()
        if count:
            raise Conflict(
                f"Cannot delete category with {count} associated products. "
                "Move or delete products first."
            )


class ProductViewSet(AuditedActionsMixin, TenantScopedModelViewSet):
    """
    Public browse with filters (category_id, is_published, low_stock, search).
    Tenant members write; admins delete.
    """
    permission_classes = [ReadPublicWriteAuth, AdminDeleteOnly]
    queryset = Product.objects.select_related("category")
    serializer_class = ProductSerializer
    filterset_class = ProductFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    ordering_fields = ("created_at", "updated_at", "price", "name", "stock")
    conflict_message = "Product with this SKU already exists for this tenant"

    audit_resource = AuditResource.PRODUCT
    audit_actions = {
        "create": AuditAction.PRODUCT_CREATE,
        "update": AuditAction.PRODUCT_UPDATE,
        "delete": AuditAction.PRODUCT_DELETE,
    }

    def get_queryset(self):
        qs = super().get_queryset()
        # Outsiders only browse the published storefront
        if not IsTenantMember().has_permission(self.request, self):
            qs = qs.filter(is_published=True)
        return qs

    def check_destroy(self, instance):
        if instance.order_items.exists():
            raise Conflict("Cannot delete product with associated orders. Consider unpublishing instead.")

    @action(detail=True, methods=["patch"])
    def stock(self, request, tenant_id=None, pk=None):
        ser = StockUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        with transaction.atomic():
            product = Product.objects.select_for_update().get(pk=self.get_object().pk)
            before = product.stock
            product.stock = ser.validated_data["stock"]
            product.save(update_fields=["stock", "updated_at"])
        audit.log_update(tenant_id=self.tenant.pk, action=AuditAction.PRODUCT_STOCK_UPDATE,
                         resource=AuditResource.PRODUCT, resource_id=product.pk,
                         before={"stock": before}, after={"stock": product.stock}, request=request)
        queue_low_stock_check(self.tenant.pk, [product.pk])
        return Response(self.get_serializer(product).data)

    @action(detail=True, methods=["patch"])
    def publish(self, request, tenant_id=None, pk=None):
        ser = PublishSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        product = self.get_object()
        product.is_published = ser.validated_data["is_published"]
        product.save(update_fields=["is_published", "updated_at"])
        action_code = AuditAction.PRODUCT_PUBLISH if product.is_published else AuditAction.PRODUCT_UNPUBLISH
        audit.log_success(tenant_id=self.tenant.pk, action=action_code, resource=AuditResource.PRODUCT,
                          resource_id=product.pk, request=request)
        return Response(self.get_serializer(product).data)

    @action(detail=True, methods=["post"], parser_classes=[MultiPartParser, FormParser])
    def image(self, request, tenant_id=None, pk=None):
        product = self.get_object()
        url = upload_file(request.FILES.get("file"), "products")
        product.image_url = request.build_absolute_uri(url)
        product.save(update_fields=["image_url", "updated_at"])
        audit.log_success(tenant_id=self.tenant.pk, action=AuditAction.PRODUCT_IMAGE_UPLOAD,
                          resource=AuditResource.PRODUCT, resource_id=product.pk, request=request,
                          metadata={"image_url": product.image_url})
        return Response(self.get_serializer(product).data)
