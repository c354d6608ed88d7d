from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import NotFound, Conflict
from common.pagination import PageLimitPagination
from common.storage import upload_file
from .constants import AuditAction, AuditResource
from .filters import AuditLogFilter
from .models import Tenant, TenantSettings, AuditLog
from .permissions import IsTenantAdmin, IsTenantMember, IsPlatformStaff
from .serializers import (
    TenantSerializer, TenantPublicSerializer, TenantSettingsSerializer, AuditLogSerializer,
)
from .services import audit
from .services.tenants import create_tenant, deactivate_tenant


# -------- Tenants (platform administration) --------
class TenantViewSet(viewsets.ModelViewSet):
    """
    Staff manage tenants; a tenant's own users may read it.
    DELETE deactivates instead of deleting.
    """
    queryset = Tenant.objects.all().order_by("name")
    serializer_class = TenantSerializer
    lookup_url_kwarg = "tenant_id"
    pagination_class = None
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):
        if self.action == "retrieve":
            return [IsTenantMember()]
        if self.action == "by_slug":
            return [AllowAny()]
        return [IsPlatformStaff()]

    def get_object(self):
        tenant = Tenant.objects.filter(pk=self.kwargs["tenant_id"]).first()
        if tenant is None:
            raise NotFound(f"Tenant with ID {self.kwargs['tenant_id']} not found")
        return tenant

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            tenant = create_tenant(**ser.validated_data)
        except Conflict as exc:
            audit.log_error(tenant_id=None, action=AuditAction.TENANT_CREATE, resource=AuditResource.TENANT,
                            error=exc, request=request, metadata={"slug": ser.validated_data["slug"]})
            raise
        data = self.get_serializer(tenant).data
        audit.log_success(tenant_id=tenant.pk, action=AuditAction.TENANT_CREATE, resource=AuditResource.TENANT,
                          resource_id=tenant.pk, request=request, metadata=data)
        return Response(data, status=status.HTTP_201_CREATED)

    def perform_update(self, serializer):
        before = self.get_serializer(serializer.instance).data
        slug = serializer.validated_data.get("slug")
        if slug and Tenant.objects.filter(slug=slug).exclude(pk=serializer.instance.pk).exists():
            raise Conflict("Tenant slug already exists")
        tenant = serializer.save()
        audit.log_update(tenant_id=tenant.pk, action=AuditAction.TENANT_UPDATE, resource=AuditResource.TENANT,
                         resource_id=tenant.pk, before=before, after=self.get_serializer(tenant).data,
                         request=self.request)

    def destroy(self, request, *args, **kwargs):
        tenant = deactivate_tenant(self.get_object())
        audit.log_success(tenant_id=tenant.pk, action=AuditAction.TENANT_DEACTIVATE,
                          resource=AuditResource.TENANT, resource_id=tenant.pk, request=request)
        return Response(self.get_serializer(tenant).data)

    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[-\w]+)", authentication_classes=[])
    def by_slug(self, request, slug=None):
        tenant = Tenant.objects.filter(slug=slug, is_active=True).first()
        if tenant is None:
            raise NotFound(f"Tenant with slug {slug} not found")
        return Response(TenantPublicSerializer(tenant).data)


# -------- Settings (one row per tenant) --------
class TenantSettingsView(APIView):
    permission_classes = [IsTenantAdmin]

    def _tenant(self, tenant_id):
        tenant = Tenant.objects.filter(pk=tenant_id, is_active=True).first()
        if tenant is None:
            raise NotFound("Tenant not found")
        return tenant

    def _settings(self, tenant_id):
        obj = TenantSettings.objects.filter(tenant_id=tenant_id).first()
        if obj is None:
            raise NotFound("Settings not found for this tenant")
        return obj

    def get(self, request, tenant_id):
        return Response(TenantSettingsSerializer(self._settings(tenant_id)).data)

    def post(self, request, tenant_id):
        tenant = self._tenant(tenant_id)
        if TenantSettings.objects.filter(tenant=tenant).exists():
            raise Conflict("Settings already exist for this tenant")
        ser = TenantSettingsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        obj = ser.save(tenant=tenant)
        audit.log_success(tenant_id=tenant.pk, action=AuditAction.SETTINGS_UPDATE, resource=AuditResource.SETTINGS,
                          resource_id=obj.pk, request=request, metadata=ser.data)
        return Response(ser.data, status=status.HTTP_201_CREATED)

    def patch(self, request, tenant_id):
        obj = self._settings(tenant_id)
        before = TenantSettingsSerializer(obj).data
        ser = TenantSettingsSerializer(obj, data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        ser.save()
        audit.log_update(tenant_id=tenant_id, action=AuditAction.SETTINGS_UPDATE, resource=AuditResource.SETTINGS,
                         resource_id=obj.pk, before=before, after=ser.data, request=request)
        return Response(ser.data)

    def delete(self, request, tenant_id):
        obj = self._settings(tenant_id)
        deleted = TenantSettingsSerializer(obj).data
        pk = obj.pk
        obj.delete()
        audit.log_delete(tenant_id=tenant_id, action=AuditAction.SETTINGS_DELETE, resource=AuditResource.SETTINGS,
                         resource_id=pk, deleted=deleted, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TenantLogoUploadView(APIView):
    permission_classes = [IsTenantAdmin]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request, tenant_id):
        obj = TenantSettings.objects.filter(tenant_id=tenant_id).first()
        if obj is None:
            raise NotFound("Settings not found for this tenant")
        url = upload_file(request.FILES.get("file"), "logos")
        obj.company_logo_url = request.build_absolute_uri(url)
        obj.save(update_fields=["company_logo_url", "updated_at"])
        audit.log_success(tenant_id=tenant_id, action=AuditAction.SETTINGS_LOGO_UPLOAD,
                          resource=AuditResource.SETTINGS, resource_id=obj.pk, request=request,
                          metadata={"company_logo_url": obj.company_logo_url})
        return Response(TenantSettingsSerializer(obj).data)


# -------- Audit trail (read side) --------
class AuditLogViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    GET logs            → every matching entry, newest first
    GET logs/paginated  → same filters, {data, meta} pages (?page=&limit=)
    """
    serializer_class = AuditLogSerializer
    permission_classes = [IsTenantAdmin]
    filter_backends = [DjangoFilterBackend]
    filterset_class = AuditLogFilter
    pagination_class = None

    def get_queryset(self):
        return (
            AuditLog.objects
            .filter(tenant_id=self.kwargs["tenant_id"])
            .select_related("user")
            .order_by("-created_at", "-id")
        )

    @action(detail=False, methods=["get"])
    def paginated(self, request, tenant_id=None):
        qs = self.filter_queryset(self.get_queryset())
        paginator = PageLimitPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(self.get_serializer(page, many=True).data)
