# backend/common/mixins.py
from __future__ import annotations

from typing import Iterable, Dict, Any, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Model, Q
from django.utils.functional import cached_property
from rest_framework.viewsets import ModelViewSet

from common.exceptions import NotFound, Conflict
from platformapp.models import Tenant
from platformapp.services import audit


# -----------------------------
# Base tenant-scoped MVSet
# -----------------------------
class TenantScopedModelViewSet(ModelViewSet):
    """
    Multi-tenant base ViewSet for routes nested under /tenants/<tenant_id>/:

    - Resolves the tenant from the `tenant_id` URL kwarg (404 when unknown or inactive).
    - Filters the queryset by `<tenant_field>_id`.
    - Injects the tenant server-side on create; payload tenant is ignored.
    - Adds simple "search" (icontains across `search_fields`) and "order" (comma-separated).

    Override:
      - `tenant_field` (default "tenant")
      - `search_fields` (tuple of field names)
      - `ordering_fields` (tuple of field names allowed for ordering)
      - `default_ordering` (sequence)
      - `conflict_message` (409 detail when a save hits a unique constraint)
    """
    tenant_url_kwarg = "tenant_id"
    tenant_field = "tenant"

    search_param = "search"
    search_fields: Iterable[str] = tuple()
    ordering_fields: Iterable[str] = tuple()
    default_ordering: Iterable[str] = ("-created_at",)

    conflict_message = "Resource already exists for this tenant"

    # ---- Tenant helpers ----
    def get_tenant_id(self) -> Optional[str]:
        tid = self.kwargs.get(self.tenant_url_kwarg)
        return str(tid) if tid else None

    @cached_property
    def tenant(self) -> Tenant:
        tenant = Tenant.objects.filter(pk=self.get_tenant_id(), is_active=True).first()
        if tenant is None:
            raise NotFound("Tenant not found")
        return tenant

    # ---- Queryset plumbing ----
    def _model_class(self) -> type[Model]:
        return self.queryset.model

    def _apply_tenant_filter(self, qs):
        return qs.filter(**{f"{self.tenant_field}_id": self.tenant.pk})

    def _apply_search(self, qs):
        q = (self.request.query_params.get(self.search_param) or "").strip()
        if not q or not self.search_fields:
            return qs
        cond = Q()
        for f in self.search_fields:
            cond |= Q(**{f"{f}__icontains": q})
        return qs.filter(cond)

    def _apply_ordering(self, qs):
        order_param = self.request.query_params.get("order")
        fields_allowed = set(self.ordering_fields or ())
        if order_param and fields_allowed:
            items = [s.strip() for s in order_param.split(",") if s.strip()]
            cleaned = [it for it in items if it.lstrip("-") in fields_allowed]
            if cleaned:
                return qs.order_by(*cleaned)
        return qs.order_by(*self.default_ordering) if self.default_ordering else qs

    def get_queryset(self):
        qs = self._apply_tenant_filter(self.queryset.all())
        if self.action == "list":
            qs = self._apply_search(qs)
            qs = self._apply_ordering(qs)
        return qs

    def get_serializer_context(self):
        ctx = super().get_serializer_context()
        if self.kwargs.get(self.tenant_url_kwarg):
            ctx["tenant"] = self.tenant
        return ctx

    def get_object(self):
        lookup = self.kwargs.get(self.lookup_url_kwarg or self.lookup_field)
        try:
            obj = self.get_queryset().filter(**{self.lookup_field: lookup}).first()
        except (ValueError, DjangoValidationError):
            obj = None
        if obj is None:
            raise NotFound(f"{self._model_class().__name__} with ID {lookup} not found")
        self.check_object_permissions(self.request, obj)
        return obj

    def save_or_conflict(self, serializer, **kwargs):
        try:
            with transaction.atomic():
                return serializer.save(**kwargs)
        except IntegrityError:
            raise Conflict(self.conflict_message)

    def perform_create(self, serializer):
        return self.save_or_conflict(serializer, tenant=self.tenant)

    def perform_update(self, serializer):
        return self.save_or_conflict(serializer)


# -----------------------------
# Audit mixin
# -----------------------------
class AuditedActionsMixin:
    """
    Attach to tenant ViewSets you want to auto-audit.
    Set `audit_resource` and `audit_actions` ({"create"|"update"|"delete": ACTION}).
    Audit failures never break the request (see platformapp.services.audit).
    """
    audit_resource: str = ""
    audit_actions: Dict[str, str] = {}

    def snapshot(self, obj) -> Dict[str, Any]:
        return dict(self.get_serializer(obj).data)

    def audit_success(self, kind: str, obj, metadata=None):
        action = self.audit_actions.get(kind)
        if not action:
            return None
        return audit.log_success(
            tenant_id=self.tenant.pk, action=action, resource=self.audit_resource,
            resource_id=obj.pk, request=self.request, metadata=metadata,
        )

    def audit_failure(self, kind: str, error, resource_id=None, metadata=None):
        action = self.audit_actions.get(kind)
        if not action:
            return None
        return audit.log_error(
            tenant_id=self.tenant.pk, action=action, resource=self.audit_resource,
            resource_id=resource_id, error=error, request=self.request, metadata=metadata,
        )

    def perform_create(self, serializer):
        try:
            super().perform_create(serializer)
        except Conflict as exc:
            self.audit_failure("create", exc, metadata={"payload": dict(serializer.initial_data)})
            raise
        obj = serializer.instance
        self.audit_success("create", obj, metadata=self.snapshot(obj))
        return obj

    def perform_update(self, serializer):
        before = self.snapshot(serializer.instance)
        try:
            super().perform_update(serializer)
        except Conflict as exc:
            self.audit_failure("update", exc, resource_id=serializer.instance.pk)
            raise
        obj = serializer.instance
        action = self.audit_actions.get("update")
        if action:
            audit.log_update(
                tenant_id=self.tenant.pk, action=action, resource=self.audit_resource,
                resource_id=obj.pk, before=before, after=self.snapshot(obj), request=self.request,
            )
        return obj

    def perform_destroy(self, instance):
        deleted = self.snapshot(instance)
        pk = instance.pk
        try:
            self.check_destroy(instance)
        except Conflict as exc:
            self.audit_failure("delete", exc, resource_id=pk)
            raise
        super().perform_destroy(instance)
        action = self.audit_actions.get("delete")
        if action:
            audit.log_delete(
                tenant_id=self.tenant.pk, action=action, resource=self.audit_resource,
                resource_id=pk, deleted=deleted, request=self.request,
            )

    def check_destroy(self, instance):
        """Raise Conflict to refuse a delete."""
