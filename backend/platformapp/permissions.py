# backend/platformapp/permissions.py
from __future__ import annotations
from typing import Optional

from rest_framework.permissions import BasePermission, SAFE_METHODS

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"


# --------------------------
# Helpers
# --------------------------
def get_request_tenant_id(request, view=None) -> Optional[str]:
    """
    Standard way to read the tenant a request targets.
    - Prefer the `tenant_id` URL kwarg (/tenants/<tenant_id>/...)
    - Fallback to the caller's own tenant
    """
    kwargs = getattr(view, "kwargs", None) or {}
    tid = kwargs.get("tenant_id") or getattr(getattr(request, "user", None), "tenant_id", None)
    return str(tid) if tid else None


def _is_platform_staff(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "is_staff", False))


def _is_tenant_member(user, tenant_id: Optional[str]) -> bool:
    if not user or not user.is_authenticated or not tenant_id:
        return False
    # Treat Django staff as super admin
    if _is_platform_staff(user):
        return True
    return str(getattr(user, "tenant_id", "") or "") == str(tenant_id)


def _is_tenant_admin(user, tenant_id: Optional[str]) -> bool:
    if not _is_tenant_member(user, tenant_id):
        return False
    return _is_platform_staff(user) or getattr(user, "role", None) == ROLE_ADMIN


# --------------------------
# Permissions
# --------------------------
class IsTenantMember(BasePermission):
    """Authenticated user belonging to the tenant in the URL."""
    message = "You do not have access to this tenant."

    def has_permission(self, request, view):
        return _is_tenant_member(request.user, get_request_tenant_id(request, view))


class IsTenantAdmin(BasePermission):
    """Tenant member holding the admin role (or Django staff)."""
    message = "Admin role required for this tenant."

    def has_permission(self, request, view):
        return _is_tenant_admin(request.user, get_request_tenant_id(request, view))


class IsTenantMemberOrReadOnly(BasePermission):
    """
    SAFE_METHODS → allowed to everyone.
    Mutations → require membership on the tenant.
    """
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return _is_tenant_member(request.user, get_request_tenant_id(request, view))


class IsPlatformStaff(BasePermission):
    """Django staff only; used for cross-tenant administration."""
    def has_permission(self, request, view):
        return _is_platform_staff(request.user)
