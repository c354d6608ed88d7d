from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional, Dict, Any

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.crypto import get_random_string
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from common.exceptions import Conflict, InvalidInput
from platformapp.constants import AuditAction, AuditResource
from platformapp.services import audit
from .models import UserRole

logger = logging.getLogger(__name__)

User = get_user_model()

FORGOT_PASSWORD_MESSAGE = "If the email exists, a reset token has been sent"


# --------------------------
# Tokens
# --------------------------
def issue_tokens(user) -> Dict[str, str]:
    """Access + refresh pair carrying tenant, role and email claims."""
    refresh = RefreshToken.for_user(user)
    refresh["tenant_id"] = str(user.tenant_id) if user.tenant_id else None
    refresh["role"] = user.role
    refresh["email"] = user.email
    return {"access_token": str(refresh.access_token), "refresh_token": str(refresh)}


def public_user(user) -> Dict[str, Any]:
    return {
        "id": str(user.pk),
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "tenant_id": str(user.tenant_id) if user.tenant_id else None,
    }


# --------------------------
# Auth flows
# --------------------------
def login(*, email: str, password: str, tenant_id, request=None) -> Dict[str, Any]:
    user = (
        User.objects
        .select_related("tenant")
        .filter(email=email.strip().lower(), tenant_id=tenant_id)
        .first()
    )
    if user is None:
        raise AuthenticationFailed("Invalid credentials")
    if not user.is_active:
        raise AuthenticationFailed("User account is inactive")
    if user.tenant and not user.tenant.is_active:
        raise AuthenticationFailed("Tenant is inactive")
    if not user.check_password(password):
        audit.log_error(tenant_id=user.tenant_id, action=AuditAction.AUTH_LOGIN, resource=AuditResource.AUTH,
                        resource_id=user.pk, user_id=user.pk, error="Invalid credentials", request=request)
        raise AuthenticationFailed("Invalid credentials")

    now = timezone.now()
    user.last_login_at = now
    user.last_login = now
    user.save(update_fields=["last_login_at", "last_login", "updated_at"])

    tokens = issue_tokens(user)
    audit.log_success(tenant_id=user.tenant_id, action=AuditAction.AUTH_LOGIN, resource=AuditResource.AUTH,
                      resource_id=user.pk, user_id=user.pk, request=request, metadata={"email": user.email})
    logger.info("User %s logged in to tenant %s", user.pk, user.tenant_id)
    return {**tokens, "user": public_user(user)}


def refresh(raw_token: str) -> Dict[str, str]:
    """Rotate a refresh token; the old one is blacklisted."""
    try:
        token = RefreshToken(raw_token)
    except TokenError:
        raise AuthenticationFailed("Invalid refresh token")

    user = User.objects.filter(pk=token.get("user_id")).first()
    if user is None or not user.is_active:
        raise AuthenticationFailed("User account is inactive")
    token.blacklist()
    return issue_tokens(user)


def logout(user, raw_token: Optional[str] = None, request=None) -> None:
    if raw_token:
        try:
            RefreshToken(raw_token).blacklist()
        except TokenError:
            raise InvalidInput("Invalid refresh token")
    audit.log_success(tenant_id=user.tenant_id, action=AuditAction.AUTH_LOGOUT, resource=AuditResource.AUTH,
                      resource_id=user.pk, request=request)


def forgot_password(*, email: str, tenant_id, request=None) -> Optional[str]:
    """
    Issue a one-hour reset token. Returns the token, or None when no such user
    (callers answer the same way in both cases).
    """
    user = User.objects.filter(email=email.strip().lower(), tenant_id=tenant_id, is_active=True).first()
    if user is None:
        return None
    user.reset_password_token = get_random_string(48)
    user.reset_password_expires_at = timezone.now() + timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES)
    user.save(update_fields=["reset_password_token", "reset_password_expires_at", "updated_at"])
    audit.log_success(tenant_id=user.tenant_id, action=AuditAction.AUTH_PASSWORD_RESET_REQUEST,
                      resource=AuditResource.AUTH, resource_id=user.pk, user_id=user.pk, request=request)
    return user.reset_password_token


def reset_password(*, token: str, new_password: str, request=None):
    user = User.objects.filter(
        reset_password_token=token,
        reset_password_expires_at__gt=timezone.now(),
        is_active=True,
    ).first()
    if user is None:
        raise InvalidInput("Invalid or expired reset token")
    user.set_password(new_password)
    user.reset_password_token = None
    user.reset_password_expires_at = None
    user.save(update_fields=["password", "reset_password_token", "reset_password_expires_at", "updated_at"])
    audit.log_success(tenant_id=user.tenant_id, action=AuditAction.AUTH_PASSWORD_RESET,
                      resource=AuditResource.AUTH, resource_id=user.pk, user_id=user.pk, request=request)
    return user


# --------------------------
# User management
# --------------------------
def create_user(*, tenant, email: str, password: str, name: str, role: str = UserRole.STAFF):
    email = email.strip().lower()
    if User.objects.filter(tenant=tenant, email=email).exists():
        raise Conflict("User with this email already exists in this tenant")
    try:
        with transaction.atomic():
            return User.objects.create_user(email=email, password=password, name=name, role=role, tenant=tenant)
    except IntegrityError:
        raise Conflict("User with this email already exists in this tenant")


def change_password(*, actor, target, new_password: str):
    """Admins may change anyone's password in their tenant; staff only their own."""
    if actor.role != UserRole.ADMIN and not actor.is_staff and actor.pk != target.pk:
        raise PermissionDenied("Staff users can only change their own password")
    target.set_password(new_password)
    target.reset_password_token = None
    target.reset_password_expires_at = None
    target.save(update_fields=["password", "reset_password_token", "reset_password_expires_at", "updated_at"])
    return target


def deactivate_user(user):
    user.is_active = False
    user.save(update_fields=["is_active", "updated_at"])
    return user
