from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import Conflict
from common.mixins import TenantScopedModelViewSet, AuditedActionsMixin
from platformapp.constants import AuditAction, AuditResource
from platformapp.permissions import IsTenantAdmin, IsTenantMember
from platformapp.services import audit
from . import services
from .serializers import (
    UserSerializer, UserCreateSerializer, PasswordChangeSerializer, LoginSerializer,
    RefreshSerializer, LogoutSerializer, ForgotPasswordSerializer, ResetPasswordSerializer,
)

User = get_user_model()


# ---------- Auth ----------
class LoginView(APIView):
    """
    POST {email, password, tenant_id} → {access_token, refresh_token, user}
    """
    permission_classes = (AllowAny,)

    def post(self, request):
        ser = LoginSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return Response(services.login(request=request, **ser.validated_data))


class RefreshView(APIView):
    permission_classes = (AllowAny,)

    def post(self, request):
        ser = RefreshSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        return Response(services.refresh(ser.validated_data["refresh_token"]))


class LogoutView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request):
        ser = LogoutSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        services.logout(request.user, ser.validated_data.get("refresh_token"), request=request)
        return Response({"message": "Logged out successfully"})


class ForgotPasswordView(APIView):
    """Same answer whether or not the email exists."""
    permission_classes = (AllowAny,)

    def post(self, request):
        ser = ForgotPasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        token = services.forgot_password(request=request, **ser.validated_data)
        body = {"message": services.FORGOT_PASSWORD_MESSAGE}
        # No mailer is wired; dev builds hand the token back directly
        if token and settings.PASSWORD_RESET_EXPOSE_TOKEN:
            body["reset_token"] = token
        return Response(body)


class ResetPasswordView(APIView):
    permission_classes = (AllowAny,)

    def post(self, request):
        ser = ResetPasswordSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        services.reset_password(request=request, **ser.validated_data)
        return Response({"message": "Password has been reset successfully"})


class MeView(APIView):
    permission_classes = (IsAuthenticated,)

    def get(self, request):
        return Response(UserSerializer(request.user).data)


# ---------- Tenant user management ----------
class UserViewSet(AuditedActionsMixin, TenantScopedModelViewSet):
    """
    Admins manage the tenant's users. DELETE deactivates.
    PATCH users/<id>/password is also open to staff for their own account.
    """
    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [IsTenantAdmin]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    filterset_fields = ["role", "is_active"]
    search_fields = ("name", "email")
    ordering_fields = ("created_at", "name", "email")
    conflict_message = "User with this email already exists in this tenant"

    audit_resource = AuditResource.USER
    audit_actions = {"create": AuditAction.USER_CREATE, "update": AuditAction.USER_UPDATE}

    def get_permissions(self):
        if self.action == "password":
            return [IsTenantMember()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):
        ser = UserCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            user = services.create_user(tenant=self.tenant, **ser.validated_data)
        except Conflict as exc:
            self.audit_failure("create", exc, metadata={"email": ser.validated_data["email"]})
            raise
        data = UserSerializer(user).data
        self.audit_success("create", user, metadata=data)
        return Response(data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        before = self.snapshot(user)
        services.deactivate_user(user)
        audit.log_delete(tenant_id=self.tenant.pk, action=AuditAction.USER_DELETE, resource=AuditResource.USER,
                         resource_id=user.pk, deleted=before, request=request)
        return Response(self.snapshot(user))

    @action(detail=True, methods=["patch"])
    def password(self, request, tenant_id=None, pk=None):
        target = self.get_object()
        ser = PasswordChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            services.change_password(actor=request.user, target=target, new_password=ser.validated_data["new_password"])
        except PermissionDenied as exc:
            audit.log_error(tenant_id=self.tenant.pk, action=AuditAction.USER_PASSWORD_UPDATE,
                            resource=AuditResource.USER, resource_id=target.pk, error=exc, request=request)
            raise
        audit.log_success(tenant_id=self.tenant.pk, action=AuditAction.USER_PASSWORD_UPDATE,
                          resource=AuditResource.USER, resource_id=target.pk, request=request)
        return Response({"message": "Password updated successfully"})
