from rest_framework.permissions import BasePermission, SAFE_METHODS

from platformapp.permissions import IsTenantMember, IsTenantAdmin, IsTenantMemberOrReadOnly


class ReadPublicWriteAuth(IsTenantMemberOrReadOnly):
    """
    Public GET/HEAD/OPTIONS; writes require a member of the URL tenant.
    Used by the storefront-facing catalog.
    """


class PrivateTenantOnly(IsTenantMember):
    """
    All requests must be authenticated AND belong to the URL tenant,
    even reads.
    """


class AdminDeleteOnly(BasePermission):
    """DELETE needs the tenant admin role; other methods defer to the view's other permissions."""
    def has_permission(self, request, view):
        if request.method != "DELETE":
            return True
        return IsTenantAdmin().has_permission(request, view)


class AdminWriteMemberRead(BasePermission):
    """Members read, admins write."""
    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return IsTenantMember().has_permission(request, view)
        return IsTenantAdmin().has_permission(request, view)
